from __future__ import annotations

import time
from typing import TYPE_CHECKING, Iterable

from nbtlib import Compound, Int, List, Long, LongArray, String

from .. import APP_NAME
from ..core.blocks import BlockState, resolve_block_state
from ..core.versions import get_version
from .grid import Grid
from .nbt import block_compound, to_bytes, write_output
from .packing import bits_for, pack_spanning

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.voxels import Voxel

AIR = BlockState("air", None)


def _xyz(x: int, y: int, z: int) -> Compound:
    return Compound({"x": Int(x), "y": Int(y), "z": Int(z)})


def encode_litematic(
    voxels: Iterable[Voxel] | Grid,
    version: str = "1.21",
    *,
    name="structure",
    author=APP_NAME,
) -> bytes:
    """Litematica schematic with a single region."""

    profile = get_version(version)
    grid = Grid.of(voxels)
    size_x, size_y, size_z = grid.size

    palette = {AIR: 0}
    cells = [0] * grid.size.volume
    for (x, y, z), voxel in grid.items():
        state = resolve_block_state(voxel.type, voxel.properties, profile.id)
        cells[(y * size_z + z) * size_x + x] = palette.setdefault(state, len(palette))

    bits = bits_for(len(palette), minimum=2)
    now = int(time.time() * 1000)

    region = Compound({
        "Position": _xyz(0, 0, 0),
        "Size": _xyz(*grid.size),
        "BlockStatePalette": List[Compound](map(block_compound, palette)),
        "BlockStates": LongArray(pack_spanning(cells, bits)),
        "TileEntities": List[Compound]([]),
        "Entities": List[Compound]([]),
        "PendingBlockTicks": List[Compound]([]),
        "PendingFluidTicks": List[Compound]([]),
    })
    root = Compound({
        "Version": Int(5),
        "MinecraftDataVersion": Int(profile.data_version),
        "Metadata": Compound({
            "Name": String(name),
            "Author": String(author),
            "Description": String(f"Generated for Minecraft {profile.label}"),
            "RegionCount": Int(1),
            "TimeCreated": Long(now),
            "TimeModified": Long(now),
            "TotalBlocks": Int(len(grid)),
            "TotalVolume": Int(grid.size.volume),
            "EnclosingSize": _xyz(*grid.size),
        }),
        "Regions": Compound({name: region}),
    })
    return to_bytes(root)


def export_litematic(
    voxels: Iterable[Voxel],
    path: Path,
    version: str = "1.21",
    *,
    author=APP_NAME,
) -> Path:
    data = encode_litematic(voxels, version, name=path.name, author=author)
    return write_output(path, ".litematic", data)
