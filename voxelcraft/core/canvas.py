from __future__ import annotations

import math
from typing import TYPE_CHECKING, Sequence, TypeVar

from ..cli.console import Console
from .voxels import Voxel, parse_type

if TYPE_CHECKING:
    from .voxels import XYZ

T = TypeVar("T")

CLEAR_PRIORITY = 1000
DOOR_PRIORITY = 100
DEFAULT_NOISE_SEED = 12345

# door facing -> (dx, dz) of the side the door opens towards
_DOOR_OFFSETS = {
    "north": (0, -1),
    "south": (0, 1),
    "east": (1, 0),
    "west": (-1, 0),
}


class Canvas:
    """Sparse voxel map with a priority-based overwrite rule.

    `voxels` keeps every accepted placement in order;
    the position index holds the one that currently wins.
    """

    def __init__(self):
        self.voxels: list[Voxel] = []
        self._index: dict[XYZ, Voxel] = {}
        self.current_group: str | None = None
        self.current_priority = 0
        self._group_counter = 0
        self._noise_seed = DEFAULT_NOISE_SEED

    # ---------- state ----------

    def clear(self, x1=None, y1=None, z1=None, x2=None, y2=None, z2=None):
        if x1 is None:
            self.voxels = []
            self._index = {}
            self.current_group = None
            self._group_counter = 0
            return

        previous = self.current_priority
        self.current_priority = CLEAR_PRIORITY
        self.fill(x1, y1, z1, x2, y2, z2, "AIR")
        self.current_priority = previous

    def snapshot(self) -> list[Voxel]:
        """Winning voxels, in order of first placement at each position."""

        return list(self._index.values())

    def get(self, x: float, y: float, z: float) -> str | None:
        position = (round_half_up(x), round_half_up(y), round_half_up(z))
        voxel = self._index.get(position)
        return voxel.type if voxel else None

    def set_priority(self, priority: int):
        self.current_priority = priority

    def begin_group(self, name: str | None = None, *, priority: int | None = None):
        self._group_counter += 1
        self.current_group = name or f"group_{self._group_counter}"
        if priority is not None:
            self.current_priority = priority
        return self.current_group

    def end_group(self):
        group = self.current_group
        self.current_group = None
        self.current_priority = 0
        return group

    # ---------- placement ----------

    def set(
        self, x: float, y: float, z: float, type: str, *, priority: int | None = None
    ):
        if not all(float(c).is_integer() for c in (x, y, z)):
            Console.warn(
                "Non-integer coordinates {coordinates}, flooring.",
                coordinates=f"({x}, {y}, {z})",
            )
        position = (math.floor(x), math.floor(y), math.floor(z))
        spec = parse_type(type)
        if priority is None:
            priority = self.current_priority

        voxel = Voxel(
            position=position,
            type=spec.type,
            properties=spec.properties,
            mode=spec.mode,
            priority=priority,
            group_id=self.current_group,
        )

        existing = self._index.get(position)
        if existing and existing.priority > priority:
            # AIR never blocks a solid block, whatever its priority
            if not existing.is_air or voxel.is_air:
                return

        self._index[position] = voxel
        self.voxels.append(voxel)

    def set_door(self, x: int, y: int, z: int, door_type: str):
        """Place both halves of a door and clear a block in front and behind it."""

        facing = "south"
        properties = parse_type(door_type).properties or ""
        for pair in properties.split(","):
            key, _, value = pair.partition("=")
            if key.strip() == "facing" and value.strip() in _DOOR_OFFSETS:
                facing = value.strip()
        dx, dz = _DOOR_OFFSETS[facing]

        for side in (1, -1):
            for dy in (0, 1):
                self.set(
                    x + side * dx, y + dy, z + side * dz, "air", priority=DOOR_PRIORITY
                )

        separator = "," if "?" in door_type else "?"
        for dy, half in ((0, "lower"), (1, "upper")):
            door = f"{door_type}{separator}half={half}"
            self.set(x, y + dy, z, door, priority=DOOR_PRIORITY)

    def fill(self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, type: str):
        for x in _inclusive(x1, x2):
            for y in _inclusive(y1, y2):
                for z in _inclusive(z1, z2):
                    self.set(x, y, z, type)

    def walls(self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, type: str):
        """The four vertical faces of a box, without floor or ceiling."""

        min_x, max_x = sorted((x1, x2))
        min_y, max_y = sorted((y1, y2))
        min_z, max_z = sorted((z1, z2))
        self.fill(min_x, min_y, min_z, max_x, max_y, min_z, type)
        self.fill(min_x, min_y, max_z, max_x, max_y, max_z, type)
        self.fill(min_x, min_y, min_z, min_x, max_y, max_z, type)
        self.fill(max_x, min_y, min_z, max_x, max_y, max_z, type)

    def line(self, x1: int, y1: int, z1: int, x2: int, y2: int, z2: int, type: str):
        steps = max(abs(x2 - x1), abs(y2 - y1), abs(z2 - z1))
        if steps == 0:
            self.set(x1, y1, z1, type)
            return
        for i in range(steps + 1):
            t = i / steps
            self.set(
                math.floor(x1 + (x2 - x1) * t),
                math.floor(y1 + (y2 - y1) * t),
                math.floor(z1 + (z2 - z1) * t),
                type,
            )

    # ---------- randomness ----------

    @staticmethod
    def random_at(x: float, y: float, z: float, seed: int = 0) -> float:
        """Pseudo-random value in [0, 1), always the same for the same inputs."""

        # stable on a given platform; libm's sin may differ from other runtimes
        # in the last digits for large arguments
        hash = int(x * 374761393 + y * 668265263 + z * 1274126177 + seed * 1103515245)
        s = math.sin(hash % 2**32) * 43758.5453123
        return s - math.floor(s)

    def pick_at(self, x: float, y: float, z: float, items: Sequence[T], seed: int = 0):
        if not items:
            return None
        return items[math.floor(self.random_at(x, y, z, seed) * len(items))]

    def _noise3d(self, x: float, y: float, z: float, scale: float = 1) -> float:
        """Layered hash noise in [-1, 1]."""

        sx = x * scale + self._noise_seed
        sy = y * scale + self._noise_seed * 1.3
        sz = z * scale + self._noise_seed * 0.7

        n1 = _fract_sin(sx * 12.9898 + sy * 78.233 + sz * 37.719)
        n2 = _fract_sin(sx * 39.346 + sy * 11.135 + sz * 83.155) * 0.5
        n3 = _fract_sin(sx * 73.156 + sy * 52.235 + sz * 9.346) * 0.25
        return (n1 + n2 + n3) / 1.75 * 2 - 1

    def _noise_params(self, noise: dict | None) -> tuple[float, float] | None:
        """(amount, scale) of a noise option, or None when noise is off."""

        if not noise or noise.get("amount") == 0:
            return None
        if noise.get("seed") is not None:
            self._noise_seed = noise["seed"]
        return noise.get("amount") or 0.3, noise.get("scale") or 0.3


def round_half_up(value: float) -> int:
    # half-up, unlike round()
    return math.floor(value + 0.5)


def _inclusive(start: int, end: int) -> range:
    low, high = sorted((start, end))
    return range(math.floor(low), math.floor(high) + 1)


def _fract_sin(n: float) -> float:
    s = math.sin(n) * 43758.5453123
    return s - math.floor(s)
