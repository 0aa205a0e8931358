import re

import pytest

from voxelcraft.core.blocks import BlockState, format_block, resolve_block_state
from voxelcraft.core.versions import LATEST, compare_versions, get_version
from voxelcraft.core.voxels import Voxel
from voxelcraft.export.commands import generate_optimized_commands


def test_modern_format():
    assert format_block("stone") == "minecraft:stone"
    assert format_block("minecraft:glass") == "minecraft:glass"
    assert (
        format_block("oak_stairs", "facing=north, half=top")
        == "minecraft:oak_stairs[facing=north,half=top]"
    )


def test_inline_properties():
    assert format_block("oak_log[axis=x]") == "minecraft:oak_log[axis=x]"


@pytest.mark.parametrize(
    "type, expected",
    [
        ("wood", "minecraft:oak_planks"),
        ("WALL_BRICK", "minecraft:bricks"),
        ("leaves", "minecraft:oak_leaves"),
        ("stone_brick", "minecraft:stone_bricks"),
        ("snow", "minecraft:snow_block"),
    ],
)
def test_aliases_and_fixes(type, expected):
    assert format_block(type) == expected


def test_unknown_block_falls_back_to_stone():
    assert format_block("definitely_not_a_block") == "minecraft:stone"


def test_grass_rename_both_ways():
    assert format_block("grass", version="1.21") == "minecraft:short_grass"
    assert format_block("short_grass", version="1.20") == "minecraft:grass"


def test_newer_blocks_fall_back_in_older_versions():
    assert format_block("cherry_planks", version="1.20") == "minecraft:cherry_planks"
    assert format_block("cherry_planks", version="1.18") == "minecraft:birch_planks"


def test_legacy_format():
    assert format_block("stone", version="1.12") == "stone"
    assert format_block("stone_bricks", version="1.12") == "stonebrick"
    assert format_block("oak_stairs", "facing=north", version="1.12") == "oak_stairs 3"
    assert format_block("oak_log", "axis=x", version="1.12") == "log 4"


def test_invalid_property_characters_are_dropped():
    assert format_block("oak_stairs", "facing=north;") == (
        "minecraft:oak_stairs[facing=north]"
    )
    assert format_block("stone", "0") == "minecraft:stone"
    assert format_block("stone", "garbage") == "minecraft:stone"


def test_resolve_block_state():
    state = resolve_block_state("oak_stairs", "facing=east", "1.12")
    assert state == BlockState("oak_stairs", "facing=east")
    assert state.namespaced == "minecraft:oak_stairs"
    assert str(state) == "minecraft:oak_stairs[facing=east]"
    assert str(resolve_block_state("wood")) == "minecraft:oak_planks"


def test_version_switch():
    voxels = [
        Voxel(position=(0, 0, 0), type="stone"),
        Voxel(position=(1, 0, 0), type="oak_stairs", properties="facing=north"),
        Voxel(position=(2, 0, 0), type="white_wool"),
        Voxel(position=(3, 0, 0), type="oak_log", properties="axis=x"),
        Voxel(position=(4, 0, 0), type="glass"),
        Voxel(position=(4, 1, 0), type="glass"),
    ]

    def tokens(version: str):
        for command in generate_optimized_commands(voxels, version):
            if command.startswith("setblock"):
                yield command.split(maxsplit=4)[4]
            else:
                yield command.split(maxsplit=7)[7]

    legacy = re.compile(r"^[a-z_]+( \d+)?$")
    assert all(legacy.match(token) for token in tokens("1.12"))
    assert all(token.startswith("minecraft:") for token in tokens("1.21"))


def test_unknown_version():
    assert get_version("0.1") is LATEST
    assert get_version("1.12").uses_numeric_ids
    assert get_version("1.20").datapack_function_dir == "functions"
    assert LATEST.datapack_function_dir == "function"


def test_compare_versions():
    assert compare_versions("1.18", "1.19") > 0
    assert compare_versions("1.21", "1.20") < 0
    assert compare_versions("1.16", "1.16") == 0
