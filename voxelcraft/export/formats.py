from __future__ import annotations

from enum import Enum

from ..core.versions import get_version


class Format(Enum):
    commands = "commands"
    one_command = "one-command"
    nbt = "nbt"
    schem = "schem"
    litematic = "litematic"
    bp = "bp"
    datapack = "datapack"

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]

    @classmethod
    def supported(cls, version: str) -> tuple[Format, ...]:
        profile = get_version(version)
        return tuple(
            f for f in cls if f is not cls.datapack or profile.supports_datapack
        )


_SUFFIXES = {
    Format.commands: ".mcfunction",
    Format.one_command: ".txt",
    Format.nbt: ".nbt",
    Format.schem: ".schem",
    Format.litematic: ".litematic",
    Format.bp: ".bp",
    Format.datapack: ".zip",
}
