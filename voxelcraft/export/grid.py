from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, NamedTuple

if TYPE_CHECKING:
    from ..core.voxels import XYZ, Voxel


class EmptyStructureError(Exception):
    def __init__(self):
        super().__init__("Nothing to export: the structure has no blocks.")


class UnsupportedFormatError(Exception): ...


class Bounds(NamedTuple):
    min_x: int
    max_x: int
    min_y: int
    max_y: int
    min_z: int
    max_z: int


class Size(NamedTuple):
    width: int  # x
    height: int  # y
    length: int  # z

    @property
    def volume(self):
        return self.width * self.height * self.length


class Grid:
    """Voxels deduplicated by position and shifted so the minimum corner is 0."""

    def __init__(self, voxels: Iterable[Voxel]):
        by_position: dict[XYZ, Voxel] = {}
        for voxel in voxels:
            position = tuple(voxel.position)
            # last write wins, but keep the first position's order
            by_position[position] = voxel  # pyright: ignore[reportArgumentType]
        if not by_position:
            raise EmptyStructureError

        xs, ys, zs = zip(*by_position)
        self.origin: XYZ = (min(xs), min(ys), min(zs))
        self.bounds = Bounds(
            min_x=0,
            max_x=max(xs) - self.origin[0],
            min_y=0,
            max_y=max(ys) - self.origin[1],
            min_z=0,
            max_z=max(zs) - self.origin[2],
        )
        self.size = Size(
            self.bounds.max_x + 1, self.bounds.max_y + 1, self.bounds.max_z + 1
        )

        ox, oy, oz = self.origin
        self.cells: dict[XYZ, Voxel] = {
            (x - ox, y - oy, z - oz): voxel for (x, y, z), voxel in by_position.items()
        }

    @classmethod
    def of(cls, voxels: Iterable[Voxel] | Grid) -> Grid:
        """Reuse an already built grid, so a structure is meshed only once."""

        return voxels if isinstance(voxels, Grid) else cls(voxels)

    def __len__(self):
        return len(self.cells)

    def items(self):
        return self.cells.items()
