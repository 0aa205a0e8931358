from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    DirectionName = Literal["north", "south", "east", "west"]

XZ = tuple[int, int]


class Direction(XZ, Enum):
    # coordinates in (x, z)
    north = (0, -1)
    south = (0, 1)
    east = (1, 0)
    west = (-1, 0)

    def rotate(self, other: XZ) -> XZ:
        # Complex multiplication, with (x, z) representing x + zi
        return (
            self[0] * other[0] - self[1] * other[1],
            self[0] * other[1] + self[1] * other[0],
        )

    def conjugate(self) -> Direction:
        return Direction((self[0], -self[1]))


DIRECTION_NAMES: list[DirectionName] = ["north", "south", "east", "west"]

# quarter turns, as the rotation applied to a facing
_QUARTER_TURNS = {
    0: Direction.east,  # identity
    90: Direction.south,
    180: Direction.west,
    270: Direction.north,
}

_FACING_PATTERN = re.compile(r"facing=(north|south|east|west)")


def get_rotation(degrees: int) -> Direction | None:
    """Facing rotation for a multiple of 90 degrees, None for other angles."""

    return _QUARTER_TURNS.get(degrees % 360)


def rotate_facing(properties: str, rotation: Direction) -> str:
    def rotate(match: re.Match[str]) -> str:
        facing = Direction[match.group(1)]
        return f"facing={Direction(rotation.rotate(facing)).name}"

    return _FACING_PATTERN.sub(rotate, properties, count=1)
