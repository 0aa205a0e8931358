from __future__ import annotations

from typing import NamedTuple

from msgspec import Struct

from ..cli.console import Console

XYZ = tuple[int, int, int]


class Voxel(Struct, kw_only=True, omit_defaults=True, rename="camel"):
    position: XYZ
    type: str
    properties: str | None = None
    mode: str | None = None
    priority: int = 0
    group_id: str | None = None

    @property
    def is_air(self) -> bool:
        return self.type.lower() == "air"


class TypeSpec(NamedTuple):
    type: str
    mode: str | None
    properties: str | None

    def __str__(self):
        # inverse of parse_type, used to replay voxels through set()
        result = self.type
        if self.mode:
            result += f":{self.mode}"
        if self.properties:
            result += f"?{self.properties}"
        return result


def parse_type(spec: str | None) -> TypeSpec:
    """Split "type:mode?k=v,k=v" into its parts.

    All-uppercase types are semantic names and keep their case,
    everything else is lowercased.
    """

    if spec is None:
        Console.warn("Missing block type, using {default}.", default="stone")
        return TypeSpec("stone", None, None)

    type = str(spec)
    mode = properties = None

    # the namespace separator is not a mode separator
    if type[:10].lower() == "minecraft:":
        type = type[10:]

    if "?" in type:
        type, properties = type.split("?", 1)

    if ":" in type:
        type, mode = type.split(":", 1)
        mode = mode.lower()

    if type != type.upper():
        type = type.lower()

    return TypeSpec(type, mode or None, properties or None)
