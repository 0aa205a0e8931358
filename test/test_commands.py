import pytest

from voxelcraft.core.blocks import format_block
from voxelcraft.core.builder import VoxelBuilder
from voxelcraft.core.versions import get_version
from voxelcraft.core.voxels import Voxel
from voxelcraft.export.commands import (
    Stacking,
    generate_one_command,
    generate_optimized_commands,
)
from voxelcraft.export.grid import EmptyStructureError


def scene():
    builder = VoxelBuilder()
    builder.fill(-3, 0, -3, 3, 0, 3, "stone_bricks")
    builder.walls(-3, 1, -3, 3, 4, 3, "oak_planks")
    builder.set_door(0, 1, -3, "oak_door?facing=north")
    builder.draw_sphere(0, 8, 0, 3, "oak_leaves")
    builder.scatter(-3, 1, -3, 3, 3, 0.5, ["poppy", "dandelion"])
    return builder.snapshot()


def rebuild(commands: list[str]):
    cells: dict[tuple[int, int, int], str] = {}
    for command in commands:
        if command.startswith("setblock"):
            _, x, y, z, block = command.split(maxsplit=4)
            boxes = [(x, y, z, x, y, z)]
        else:
            _, x1, y1, z1, x2, y2, z2, block = command.split(maxsplit=7)
            boxes = [(x1, y1, z1, x2, y2, z2)]
        for box in boxes:
            x1, y1, z1, x2, y2, z2 = (int(c.removeprefix("~")) for c in box)
            for x in range(x1, x2 + 1):
                for y in range(y1, y2 + 1):
                    for z in range(z1, z2 + 1):
                        assert (x, y, z) not in cells
                        cells[(x, y, z)] = block
    return cells


@pytest.mark.parametrize("version", ["1.21", "1.16", "1.12", "1.8"])
def test_merge_covers_exactly_the_input(version):
    voxels = scene()
    origin = tuple(min(v.position[i] for v in voxels) for i in range(3))
    expected = {
        tuple(p - o for p, o in zip(voxel.position, origin)): format_block(
            voxel.type, voxel.properties, version
        )
        for voxel in voxels
    }

    commands = generate_optimized_commands(voxels, version)
    assert rebuild(commands) == expected
    assert len(commands) < len(voxels)


def test_merge_fills_boxes():
    builder = VoxelBuilder()
    builder.fill(10, 64, 10, 14, 66, 12, "stone")
    assert generate_optimized_commands(builder.snapshot()) == [
        "fill ~0 ~0 ~0 ~4 ~2 ~2 minecraft:stone"
    ]


def test_merge_is_deterministic():
    assert generate_optimized_commands(scene()) == generate_optimized_commands(scene())


def test_duplicate_positions_last_wins():
    voxels = [
        Voxel(position=(0, 0, 0), type="stone"),
        Voxel(position=(0, 0, 0), type="glass"),
    ]
    assert generate_optimized_commands(voxels) == ["setblock ~0 ~0 ~0 minecraft:glass"]


def test_empty_input():
    with pytest.raises(EmptyStructureError):
        generate_optimized_commands([])


STONE = [Voxel(position=(5, 5, 5), type="stone")]


def test_one_command_modern():
    assert generate_one_command(STONE, "1.21") == (
        "summon falling_block ~ ~2 ~ "
        '{BlockState:{Name:"command_block"},Time:1,TileEntityData:{Command:""},'
        'Passengers:[{id:"falling_block",BlockState:{Name:"redstone_block"},Time:1,'
        'Passengers:[{id:"falling_block",BlockState:{Name:"activator_rail"},Time:1,'
        "Passengers:["
        '{id:"command_block_minecart",Command:"setblock ~0 ~0 ~0 minecraft:stone"},'
        '{id:"command_block_minecart",Command:"setblock ~ ~-2 ~ air"},'
        '{id:"command_block_minecart",'
        'Command:"kill @e[type=command_block_minecart,distance=..5]"},'
        '{id:"command_block_minecart",Command:"kill @e[type=falling_block,distance=..5]"},'
        '{id:"command_block_minecart",Command:"kill @e[type=armor_stand,distance=..5]"}'
        "]}]}]}"
    )


def test_one_command_numeric_ids():
    assert generate_one_command(STONE, "1.12") == (
        "summon falling_block ~ ~2 ~ "
        '{Block:command_block,Time:1,TileEntityData:{Command:""},'
        "Passengers:[{id:falling_block,Block:redstone_block,Time:1,"
        "Passengers:[{id:falling_block,Block:activator_rail,Time:1,"
        "Passengers:["
        '{id:commandblock_minecart,Command:"setblock ~0 ~0 ~0 stone"},'
        '{id:commandblock_minecart,Command:"fill ~ ~-3 ~ ~ ~ ~ air"},'
        '{id:commandblock_minecart,Command:"kill @e[type=commandblock_minecart,r=3]"},'
        '{id:commandblock_minecart,Command:"kill @e[type=falling_block,r=3]"}'
        "]}]}]}"
    )


def test_one_command_old_entities():
    assert generate_one_command(STONE, "1.9-1.10") == (
        "summon FallingSand ~ ~2 ~ "
        '{Block:command_block,Time:1,TileEntityData:{Command:""},'
        "Passengers:[{id:FallingSand,Block:redstone_block,Time:1,"
        "Passengers:[{id:FallingSand,Block:activator_rail,Time:1,"
        "Passengers:["
        '{id:MinecartCommandBlock,Command:"setblock ~0 ~0 ~0 stone"},'
        '{id:MinecartCommandBlock,Command:"fill ~ ~-3 ~ ~ ~ ~ air"},'
        '{id:MinecartCommandBlock,Command:"kill @e[type=MinecartCommandBlock,r=3]"}'
        "]}]}]}"
    )


def test_one_command_riding():
    assert generate_one_command(STONE, "1.8") == (
        "summon FallingSand ~ ~1 ~ {Block:redstone_block,Time:1,"
        "Riding:{id:FallingSand,Block:command_block,Time:1,"
        "TileEntityData:{Command:/fill ~ ~-1 ~-1 ~ ~-2 ~-1 redstone_block},"
        "Riding:{id:FallingSand,Block:command_block,Time:1,"
        "TileEntityData:{Command:setblock ~0 ~0 ~0 stone}}}}"
    )


def test_riding_chain_order():
    voxels = [
        Voxel(position=(0, 0, 0), type="stone"),
        Voxel(position=(5, 0, 0), type="glass"),
    ]
    command = generate_one_command(voxels, "1.8")
    assert "~-3 ~-1 redstone_block" in command
    assert command.index("stone}") < command.index("glass}")


@pytest.mark.parametrize(
    "version, stacking",
    [
        ("1.21", Stacking.block_states),
        ("1.13", Stacking.block_states),
        ("1.11", Stacking.numeric_ids),
        ("1.9-1.10", Stacking.old_entities),
        ("1.8", Stacking.riding),
    ],
)
def test_stacking_for_version(version, stacking):
    assert Stacking.for_version(get_version(version)) is stacking
