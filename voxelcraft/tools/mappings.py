"""Fallbacks for blocks that older versions do not have.

Regenerates the `renames` and `fallbacks` tables from `similarity.json`:
every block introduced after 1.13 is marked missing in the newest
registered version that predates it, and replaced with the most similar
block from the 1.13 baseline.
"""

from __future__ import annotations

import re

from msgspec import Struct

from ..core.versions import VERSIONS
from ..data import tables


# first match wins, provided the fallback exists in the baseline
PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(pattern), fallback)
    for pattern, fallback in [
        (r"_planks$", "oak_planks"),
        (r"_log$", "oak_log"),
        (r"_wood$", "oak_wood"),
        (r"_slab$", "oak_slab"),
        (r"_stairs$", "oak_stairs"),
        (r"_fence$", "oak_fence"),
        (r"_fence_gate$", "oak_fence_gate"),
        (r"_door$", "oak_door"),
        (r"_trapdoor$", "oak_trapdoor"),
        (r"_button$", "oak_button"),
        (r"_pressure_plate$", "oak_pressure_plate"),
        (r"_sign$", "oak_sign"),
        (r"_wall_sign$", "oak_wall_sign"),
        (r"_hanging_sign$", "oak_sign"),
        (r"_wall_hanging_sign$", "oak_wall_sign"),
        (r"deepslate", "stone"),
        (r"blackstone", "cobblestone"),
        (r"tuff", "andesite"),
        (r"calcite", "diorite"),
        (r"copper", "iron_block"),
        (r"^exposed_", "iron_block"),
        (r"^weathered_", "iron_block"),
        (r"^oxidized_", "iron_block"),
        (r"^waxed_", "iron_block"),
        (r"crimson", "nether_bricks"),
        (r"warped", "prismarine"),
        (r"soul_", "netherrack"),
        (r"basalt", "stone"),
        (r"sculk", "black_wool"),
        (r"^mud", "dirt"),
        (r"mangrove", "oak_planks"),
        (r"cherry", "birch_planks"),
        (r"bamboo", "oak_planks"),
        (r"pale_oak", "birch_planks"),
        (r"pale_moss", "moss_block"),
        (r"amethyst", "purple_stained_glass"),
        (r"candle", "torch"),
        (r"froglight", "glowstone"),
        (r"dripleaf", "lily_pad"),
        (r"moss", "green_wool"),
        (r"honey", "yellow_stained_glass"),
        (r"resin", "orange_terracotta"),
    ]
]


class Mappings(Struct):
    renames: dict[str, dict[str, None]]
    fallbacks: dict[str, str]


def _similar(block: str, groups: dict[str, list[str]], available: set[str]):
    for members in groups.values():
        if block not in members:
            continue
        for alternative in members:
            if alternative != block and alternative in available:
                return alternative


def find_fallback(block: str, available: set[str]) -> str:
    table = tables.similarity()
    if fallback := _similar(block, table.materials, available):
        return fallback
    if fallback := _similar(block, table.colors, available):
        return fallback
    for pattern, fallback in PATTERNS:
        if pattern.search(block) and fallback in available:
            return fallback
    return "stone"


def _release(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in version.split("-")[0].split("."))


def previous_version(added_in: str) -> str | None:
    """Newest registered version without blocks added in `added_in`.

    None when the latest profile already covers that release.
    """

    older = [v for v in VERSIONS if _release(v.id) < _release(added_in)]
    if not older:
        return None
    newest = max(older, key=lambda v: _release(v.id))
    return None if newest.is_latest else newest.id


def generate_mappings() -> Mappings:
    table = tables.similarity()
    baseline = set(table.baseline)

    renames: dict[str, dict[str, None]] = {}
    fallbacks: dict[str, str] = {}
    for version, blocks in table.added.items():
        previous = previous_version(version)
        if previous is None:
            continue
        for block in blocks:
            renames[block] = {previous: None}
            fallbacks[block] = find_fallback(block, baseline)

    return Mappings(
        renames=dict(sorted(renames.items())),
        fallbacks=dict(sorted(fallbacks.items())),
    )
