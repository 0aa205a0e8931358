from __future__ import annotations

from dataclasses import dataclass
from functools import cache

from ..cli.console import Console


@dataclass(frozen=True)
class VersionProfile:
    id: str
    label: str
    description: str
    data_version: int
    pack_format: int
    is_latest: bool = False
    uses_numeric_ids: bool = False
    uses_old_entity_ids: bool = False
    supports_datapack: bool = True

    @property
    def datapack_function_dir(self) -> str:
        # renamed from "functions" in 1.21
        return "function" if self.pack_format >= 48 else "functions"


# newest first
VERSIONS: tuple[VersionProfile, ...] = (
    VersionProfile("1.21", "1.21+", "Tricky Trials", 3953, 48, is_latest=True),
    VersionProfile("1.20", "1.20.x", "Trails & Tales", 3700, 15),
    VersionProfile("1.19", "1.19.x", "The Wild Update", 3337, 10),
    VersionProfile("1.18", "1.18.x", "Caves & Cliffs Part 2", 2975, 8),
    VersionProfile("1.17", "1.17.x", "Caves & Cliffs Part 1", 2730, 7),
    VersionProfile("1.16", "1.16.x", "Nether Update", 2586, 6),
    VersionProfile("1.15", "1.15.x", "Buzzy Bees", 2230, 5),
    VersionProfile("1.14", "1.14.x", "Village & Pillage", 1976, 4),
    VersionProfile("1.13", "1.13.x", "Update Aquatic", 1631, 4),
    VersionProfile(
        "1.12",
        "1.12.x",
        "World of Color",
        1343,
        3,
        uses_numeric_ids=True,
        supports_datapack=False,
    ),
    VersionProfile(
        "1.11",
        "1.11.x",
        "Exploration Update",
        922,
        3,
        uses_numeric_ids=True,
        supports_datapack=False,
    ),
    VersionProfile(
        "1.9-1.10",
        "1.9.x - 1.10.x",
        "Combat Update",
        512,
        2,
        uses_numeric_ids=True,
        uses_old_entity_ids=True,
        supports_datapack=False,
    ),
    VersionProfile(
        "1.8",
        "1.8.x",
        "Bountiful Update",
        0,
        1,
        uses_numeric_ids=True,
        uses_old_entity_ids=True,
        supports_datapack=False,
    ),
)

LATEST = VERSIONS[0]

_INDEX = {v.id: i for i, v in enumerate(VERSIONS)}


@cache
def get_version(version_id: str) -> VersionProfile:
    try:
        return VERSIONS[_INDEX[version_id]]
    except KeyError:
        Console.warn(
            "Unknown Minecraft version {version}, using {latest}.",
            version=version_id,
            latest=LATEST.id,
        )
        return LATEST


def compare_versions(v1: str, v2: str) -> int:
    """Positive if v1 is older than v2, negative if newer, 0 if same."""

    return _INDEX.get(v1, -1) - _INDEX.get(v2, -1)
