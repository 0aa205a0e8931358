from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from nbtlib import Compound, Int, IntArray, Short

from ..core.blocks import resolve_block_state
from ..core.versions import get_version
from .grid import Grid
from .nbt import byte_array, to_bytes, write_output
from .packing import varint

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.voxels import Voxel

AIR = "minecraft:air"


def encode_schematic(voxels: Iterable[Voxel] | Grid, version: str = "1.21") -> bytes:
    """Sponge schematic v3, as read by WorldEdit."""

    profile = get_version(version)
    grid = Grid.of(voxels)
    width, height, length = grid.size

    palette = {AIR: 0}
    cells = [0] * grid.size.volume
    for (x, y, z), voxel in grid.items():
        state = str(resolve_block_state(voxel.type, voxel.properties, profile.id))
        cells[(y * length + z) * width + x] = palette.setdefault(state, len(palette))

    root = Compound({
        "Version": Int(3),
        "DataVersion": Int(profile.data_version),
        "Width": Short(width),
        "Height": Short(height),
        "Length": Short(length),
        "Offset": IntArray([0, 0, 0]),
        "Metadata": Compound({
            "WEOffsetX": Int(0),
            "WEOffsetY": Int(0),
            "WEOffsetZ": Int(0),
        }),
        "Blocks": Compound({
            "Palette": Compound({k: Int(v) for k, v in palette.items()}),
            "Data": byte_array(b"".join(map(varint, cells))),
        }),
    })
    return to_bytes(root, root_name="Schematic")


def export_schematic(voxels: Iterable[Voxel], path: Path, version: str = "1.21") -> Path:
    return write_output(path, ".schem", encode_schematic(voxels, version))
