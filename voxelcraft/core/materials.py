from __future__ import annotations

from typing import NamedTuple


class StairSet(NamedTuple):
    stairs: str
    solid: str
    slab: str | None


_SOLIDS = {
    "oak": "oak_planks",
    "spruce": "spruce_planks",
    "birch": "birch_planks",
    "jungle": "jungle_planks",
    "acacia": "acacia_planks",
    "dark_oak": "dark_oak_planks",
    "crimson": "crimson_planks",
    "warped": "warped_planks",
    "mangrove": "mangrove_planks",
    "cherry": "cherry_planks",
    "bamboo": "bamboo_planks",
    "bamboo_mosaic": "bamboo_mosaic",
    "stone": "stone",
    "cobblestone": "cobblestone",
    "mossy_cobblestone": "mossy_cobblestone",
    "stone_brick": "stone_bricks",
    "mossy_stone_brick": "mossy_stone_bricks",
    "brick": "bricks",
    "sandstone": "sandstone",
    "smooth_sandstone": "smooth_sandstone",
    "red_sandstone": "red_sandstone",
    "nether_brick": "nether_bricks",
    "red_nether_brick": "red_nether_bricks",
    "quartz": "quartz_block",
    "prismarine": "prismarine",
    "dark_prismarine": "dark_prismarine",
    "purpur": "purpur_block",
    "deepslate": "deepslate",
    "cobbled_deepslate": "cobbled_deepslate",
    "polished_deepslate": "polished_deepslate",
    "deepslate_brick": "deepslate_bricks",
    "deepslate_tile": "deepslate_tiles",
    "polished_blackstone": "polished_blackstone",
    "polished_blackstone_brick": "polished_blackstone_bricks",
    "cut_copper": "cut_copper",
}

STAIR_SETS = {
    f"{material}_stairs": StairSet(f"{material}_stairs", solid, f"{material}_slab")
    for material, solid in _SOLIDS.items()
}


def stair_set(type: str) -> StairSet:
    """Stair, full block and slab of the material named by `type`.

    `type` may be either the stairs or the full block.
    """

    base = type.split("?")[0]
    if base in STAIR_SETS:
        return STAIR_SETS[base]

    if "_stairs" in base:
        solid = base.replace("_stairs", "s").replace("ss", "s")
        return StairSet(base, solid, base.replace("_stairs", "_slab"))

    for candidate in STAIR_SETS.values():
        if candidate.solid == base:
            return candidate

    stairs = (
        base.replace("_bricks", "_brick_stairs")
        .replace("_planks", "_stairs")
        .replace("_tiles", "_tile_stairs")
        .replace("_block", "_stairs")
    )
    return StairSet(stairs, base, None)
