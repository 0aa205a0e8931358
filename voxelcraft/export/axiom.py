from __future__ import annotations

import struct
from typing import TYPE_CHECKING, Iterable

from nbtlib import Byte, Compound, Float, Int, List, Long, LongArray, String

from .. import APP_NAME
from ..cli.console import Console
from ..core.blocks import BlockState, resolve_block_state
from ..core.versions import get_version
from .grid import Grid
from .nbt import block_compound, to_bytes, write_output
from .packing import bits_for, pack_non_spanning
from .thumbnail import placeholder, render_thumbnail

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.voxels import XYZ, Voxel

MAGIC = b"\x0a\xe5\xbb\x36\x00"
REGION_SIZE = 16
REGION_VOLUME = REGION_SIZE**3

# axiom's empty cell
VOID = BlockState("structure_void", None)


def _region_entries(grid: Grid, version: str):
    regions: dict[XYZ, dict[XYZ, BlockState]] = {}
    for (x, y, z), voxel in grid.items():
        key = (x // REGION_SIZE, y // REGION_SIZE, z // REGION_SIZE)
        local = (x % REGION_SIZE, y % REGION_SIZE, z % REGION_SIZE)
        state = resolve_block_state(voxel.type, voxel.properties, version)
        regions.setdefault(key, {})[local] = state

    for (rx, ry, rz), cells in regions.items():
        palette = {VOID: 0}
        values = [0] * REGION_VOLUME
        for (lx, ly, lz), state in cells.items():
            values[ly * 256 + lz * 16 + lx] = palette.setdefault(state, len(palette))

        block_states = Compound({
            "palette": List[Compound](map(block_compound, palette))
        })
        if len(palette) > 1:
            bits = bits_for(len(palette), minimum=4)
            block_states["data"] = LongArray(
                pack_non_spanning(values, bits, REGION_VOLUME)
            )
        yield Compound({
            "BlockStates": block_states,
            "X": Int(rx),
            "Y": Int(ry),
            "Z": Int(rz),
        })


def _thumbnail(grid: Grid, version: str) -> bytes:
    try:
        return render_thumbnail(grid, version)
    except (OSError, ValueError) as e:
        Console.warn("Could not render thumbnail, using a placeholder: {error}", error=e)
        return placeholder()


def encode_axiom(
    voxels: Iterable[Voxel] | Grid,
    version: str = "1.21",
    *,
    name="structure",
    author=APP_NAME,
) -> bytes:
    """Axiom blueprint.

    Layout: 5-byte magic, 3-byte metadata length, metadata NBT,
    then the length-prefixed PNG thumbnail and gzipped block data.
    """

    profile = get_version(version)
    grid = Grid.of(voxels)

    blocks = to_bytes(
        Compound({
            "DataVersion": Int(profile.data_version),
            "BlockRegion": List[Compound](_region_entries(grid, profile.id)),
            "BlockEntities": List[Compound]([]),
            "Entities": List[Compound]([]),
        })
    )
    metadata = to_bytes(
        Compound({
            "ThumbnailYaw": Float(135.0),
            "ContainsAir": Byte(1),
            "Version": Long(1),
            "LockedThumbnail": Byte(0),
            "BlockCount": Int(len(grid)),
            "Author": String(author),
            "Tags": List[String]([]),
            "Name": String(name),
            "ThumbnailPitch": Float(30.0),
        }),
        gzipped=False,
    )
    thumbnail = _thumbnail(grid, profile.id)

    return b"".join([
        MAGIC,
        len(metadata).to_bytes(3, "big"),
        metadata,
        struct.pack(">I", len(thumbnail)),
        thumbnail,
        struct.pack(">I", len(blocks)),
        blocks,
    ])


def export_axiom(
    voxels: Iterable[Voxel],
    path: Path,
    version: str = "1.21",
    *,
    author=APP_NAME,
) -> Path:
    data = encode_axiom(voxels, version, name=path.name, author=author)
    return write_output(path, ".bp", data)
