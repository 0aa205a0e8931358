from __future__ import annotations

from io import BytesIO
from typing import TYPE_CHECKING, Iterable

from PIL import Image, ImageDraw

from .. import APP_NAME
from ..core.blocks import resolve_block_state
from ..data import tables
from .grid import Grid

if TYPE_CHECKING:
    from ..core.voxels import Voxel
    from ..data.tables import RGBA

THUMBNAIL_SIZE = 96
WATERMARK_HEIGHT = 10

# face shading, relative to the block colour
_TOP = 1.15
_Z_FACE = 0.7
_X_FACE = 0.5


def _shade(color: RGBA, factor: float) -> tuple[int, int, int]:
    r, g, b = color[:3]
    return (
        min(255, int(r * factor)),
        min(255, int(g * factor)),
        min(255, int(b * factor)),
    )


def _sky(size: int) -> Image.Image:
    image = Image.new("RGB", (size, size))
    draw = ImageDraw.Draw(image)
    for y in range(size):
        t = 1 - y / size
        draw.line(
            [(0, y), (size - 1, y)],
            fill=(int(135 + 60 * t), int(175 + 50 * t), int(220 + 25 * t)),
        )
    return image


def render_thumbnail(
    voxels: Iterable[Voxel] | Grid, version: str = "1.21", *, size=THUMBNAIL_SIZE
) -> bytes:
    """Isometric PNG preview, stored bottom row first."""

    grid = Grid.of(voxels)
    size_x, size_y, size_z = grid.size
    colors = tables.colors()
    default = colors["default"]

    # fit the projection into the image, above the watermark
    block_h = max(
        1.0,
        min(
            size * 0.85 / (size_x + size_z),
            (size - 14) * 0.85 / ((size_x + size_z) / 2 + size_y),
        ),
    )
    block_w = block_h * 2
    center_x = size / 2
    center_y = (size - 12) / 2 - ((size_x + size_z) / 4 - size_y / 2) * block_h

    def project(x: float, y: float, z: float):
        return (
            center_x + (x - z) * block_w / 2,
            center_y + (x + z) * block_h / 2 - y * block_h,
        )

    image = _sky(size)
    draw = ImageDraw.Draw(image)

    # painter's algorithm: bottom layers first, then back to front
    cells = sorted(grid.items(), key=lambda cell: (cell[0][1], cell[0][0] + cell[0][2]))
    for (x, y, z), voxel in cells:
        name = resolve_block_state(voxel.type, voxel.properties, version).name
        color = colors.get(name, default)
        if len(color) == 4 and color[3] == 0:
            continue

        z_face = [
            project(x, y + 1, z),
            project(x, y + 1, z + 1),
            project(x, y, z + 1),
            project(x, y, z),
        ]
        x_face = [
            project(x + 1, y + 1, z),
            project(x + 1, y, z),
            project(x + 1, y, z + 1),
            project(x + 1, y + 1, z + 1),
        ]
        top = [
            project(x, y + 1, z),
            project(x + 1, y + 1, z),
            project(x + 1, y + 1, z + 1),
            project(x, y + 1, z + 1),
        ]
        draw.polygon(z_face, fill=_shade(color, _Z_FACE))
        draw.polygon(x_face, fill=_shade(color, _X_FACE))
        draw.polygon(top, fill=_shade(color, _TOP))

    bar = (0, size - WATERMARK_HEIGHT, size, size)
    image.paste(image.crop(bar).point(lambda v: int(v * 0.25)), bar[:2])
    draw.text((3, size - WATERMARK_HEIGHT), APP_NAME.upper(), fill=(220, 220, 220))

    return _png(image.transpose(Image.Transpose.FLIP_TOP_BOTTOM))


def placeholder() -> bytes:
    return _png(Image.new("RGB", (8, 8), (64, 64, 64)))


def _png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
