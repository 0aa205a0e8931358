from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable

from ..core.blocks import format_block
from ..core.versions import get_version
from .grid import Grid

if TYPE_CHECKING:
    from ..core.versions import VersionProfile
    from ..core.voxels import XYZ, Voxel


def merge_regions(grid: Grid, version: str) -> list[str]:
    """Greedy box merge of same-block cells into setblock/fill commands.

    Cells are grouped by their block id in first-appearance order;
    each unvisited cell grows along x, then z, then y.
    """

    groups: dict[str, list[XYZ]] = {}
    for position, voxel in grid.items():
        block_id = format_block(voxel.type, voxel.properties, version)
        groups.setdefault(block_id, []).append(position)

    commands: list[str] = []
    for block_id, positions in groups.items():
        members = set(positions)
        visited: set[XYZ] = set()

        def free(x: int, y: int, z: int):
            return (x, y, z) in members and (x, y, z) not in visited

        for x1, y1, z1 in positions:
            if (x1, y1, z1) in visited:
                continue
            x2, y2, z2 = x1, y1, z1

            while free(x2 + 1, y1, z1):
                x2 += 1
            while all(free(x, y1, z2 + 1) for x in range(x1, x2 + 1)):
                z2 += 1
            while all(
                free(x, y2 + 1, z)
                for x in range(x1, x2 + 1)
                for z in range(z1, z2 + 1)
            ):
                y2 += 1

            visited.update(
                (x, y, z)
                for x in range(x1, x2 + 1)
                for y in range(y1, y2 + 1)
                for z in range(z1, z2 + 1)
            )
            if (x1, y1, z1) == (x2, y2, z2):
                commands.append(f"setblock ~{x1} ~{y1} ~{z1} {block_id}")
            else:
                commands.append(
                    f"fill ~{x1} ~{y1} ~{z1} ~{x2} ~{y2} ~{z2} {block_id}"
                )

    return commands


def generate_optimized_commands(
    voxels: Iterable[Voxel] | Grid, version: str = "1.21"
) -> list[str]:
    return merge_regions(Grid.of(voxels), version)


# ---------- one command ----------


def _escape(command: str) -> str:
    return command.replace('"', '\\"')


def _riding_chain(commands: list[str]) -> str:
    # falling command blocks, each riding the next one down
    chain = ""
    for command in reversed(commands):
        link = (
            "{id:FallingSand,Block:command_block,Time:1,"
            f"TileEntityData:{{Command:{_escape(command)}}}"
        )
        if chain:
            link += f",Riding:{chain}"
        chain = link + "}"

    chain = (
        "{id:FallingSand,Block:command_block,Time:1,TileEntityData:{Command:"
        f"/fill ~ ~-1 ~-1 ~ ~{-(len(commands) + 1)} ~-1 redstone_block}},"
        f"Riding:{chain}}}"
    )
    return f"summon FallingSand ~ ~1 ~ {{Block:redstone_block,Time:1,Riding:{chain}}}"


def _legacy_passengers(commands: list[str], *, cart: str, falling_block: str):
    carts = [f'{{id:{cart},Command:"{_escape(command)}"}}' for command in commands]
    carts.append('{id:%s,Command:"fill ~ ~-3 ~ ~ ~ ~ air"}' % cart)
    carts.append('{id:%s,Command:"kill @e[type=%s,r=3]"}' % (cart, cart))
    if falling_block == "falling_block":
        carts.append('{id:%s,Command:"kill @e[type=falling_block,r=3]"}' % cart)
    return (
        f"summon {falling_block} ~ ~2 ~ "
        "{Block:command_block,Time:1,TileEntityData:{Command:\"\"},Passengers:["
        f"{{id:{falling_block},Block:redstone_block,Time:1,Passengers:["
        f"{{id:{falling_block},Block:activator_rail,Time:1,Passengers:["
        f"{','.join(carts)}"
        "]}]}]}"
    )


def _old_entity_passengers(commands: list[str]) -> str:
    return _legacy_passengers(
        commands, cart="MinecartCommandBlock", falling_block="FallingSand"
    )


def _numeric_passengers(commands: list[str]) -> str:
    return _legacy_passengers(
        commands, cart="commandblock_minecart", falling_block="falling_block"
    )


def _modern_passengers(commands: list[str]) -> str:
    cart = '{id:"command_block_minecart",Command:"%s"}'
    carts = [cart % _escape(command) for command in commands]
    carts.append(cart % "setblock ~ ~-2 ~ air")
    for entity in ("command_block_minecart", "falling_block", "armor_stand"):
        carts.append(cart % f"kill @e[type={entity},distance=..5]")
    return (
        "summon falling_block ~ ~2 ~ "
        '{BlockState:{Name:"command_block"},Time:1,'
        'TileEntityData:{Command:""},Passengers:['
        '{id:"falling_block",BlockState:{Name:"redstone_block"},Time:1,Passengers:['
        '{id:"falling_block",BlockState:{Name:"activator_rail"},Time:1,Passengers:['
        f"{','.join(carts)}"
        "]}]}]}"
    )


class Stacking(Enum):
    """How the entity stack carrying the commands is spelled."""

    riding = "riding"
    old_entities = "old_entities"
    numeric_ids = "numeric_ids"
    block_states = "block_states"

    @classmethod
    def for_version(cls, profile: VersionProfile) -> Stacking:
        if profile.id == "1.8":
            return cls.riding
        if profile.uses_old_entity_ids:
            return cls.old_entities
        if profile.uses_numeric_ids:
            return cls.numeric_ids
        return cls.block_states


_ENCODERS: dict[Stacking, Callable[[list[str]], str]] = {
    Stacking.riding: _riding_chain,
    Stacking.old_entities: _old_entity_passengers,
    Stacking.numeric_ids: _numeric_passengers,
    Stacking.block_states: _modern_passengers,
}


def generate_one_command(voxels: Iterable[Voxel] | Grid, version: str = "1.21") -> str:
    """A single summon command that builds the structure when run
    from a command block.

    Long structures can exceed the command block's character limit.
    """

    profile = get_version(version)
    commands = generate_optimized_commands(voxels, profile.id)
    return _ENCODERS[Stacking.for_version(profile)](commands)
