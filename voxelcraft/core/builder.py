from __future__ import annotations

from .components import Components
from .organic import Organic
from .roofs import Roofs
from .shapes import Shapes


class VoxelBuilder(Components, Organic, Roofs, Shapes):
    """The `builder` object handed to build scripts.

    Coordinates are integers; y points up, north is -z, east is +x.
    Block types are plain names ("stone_bricks"), semantic names ("WALL_STONE"),
    optionally with a mode ("leaves:noise") and block-state properties
    ("oak_stairs?facing=north,half=top").

    When two placements land on the same position, the one with the higher
    priority wins; on a tie the later one wins. Air never protects a position
    from a solid block.
    """
