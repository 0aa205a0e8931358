from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from nbtlib import Compound, Int, List

from ..core.blocks import resolve_block_state
from ..core.versions import get_version
from .grid import Grid
from .nbt import block_compound, to_bytes, write_output

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.blocks import BlockState
    from ..core.voxels import Voxel


def encode_nbt_structure(
    voxels: Iterable[Voxel] | Grid, version: str = "1.21"
) -> bytes:
    """Vanilla structure file, as loaded by structure blocks."""

    profile = get_version(version)
    grid = Grid.of(voxels)

    palette: dict[BlockState, int] = {}
    blocks = List[Compound]([])
    for (x, y, z), voxel in grid.items():
        state = resolve_block_state(voxel.type, voxel.properties, profile.id)
        index = palette.setdefault(state, len(palette))
        blocks.append(
            Compound({
                "pos": List[Int]([Int(x), Int(y), Int(z)]),
                "state": Int(index),
            })
        )

    root = Compound({
        "DataVersion": Int(profile.data_version),
        "size": List[Int](map(Int, grid.size)),
        "palette": List[Compound](map(block_compound, palette)),
        "blocks": blocks,
        "entities": List[Compound]([]),
    })
    return to_bytes(root)


def export_nbt_structure(
    voxels: Iterable[Voxel], path: Path, version: str = "1.21"
) -> Path:
    return write_output(path, ".nbt", encode_nbt_structure(voxels, version))
