from __future__ import annotations

import math
from typing import Sequence

from ..cli.console import Console
from .canvas import Canvas, round_half_up
from .materials import stair_set

_SWAY = {
    "east": (1, 0),
    "west": (-1, 0),
    "south": (0, 1),
    "north": (0, -1),
}

# sub-seeds, one per kind of decision
_SEED_SPREAD_X = 11
_SEED_SPREAD_Z = 12
_SEED_LENGTH = 13
_SEED_SWAY = 14
_SEED_TYPE = 15
_SEED_RING = 16
_SEED_SCATTER = 17


def _as_list(types: str | Sequence[str]) -> list[str]:
    return [types] if isinstance(types, str) else list(types)


class Organic(Canvas):
    def draw_spiral_stairs(
        self,
        x: int,
        y: int,
        z: int,
        radius: int,
        height: int,
        type: str,
        *,
        clockwise=True,
        turns: float = 1,
        width: int = 2,
        pillar=False,
        pillar_type="oak_log",
    ):
        steps_per_turn = math.ceil(2 * math.pi * radius / 1.5)
        total_steps = max(1, math.ceil(steps_per_turn * turns))
        rise = height / total_steps
        turn = 2 * math.pi * turns / total_steps
        materials = stair_set(type)
        inner = materials.solid if materials.solid != materials.stairs else "stone"

        for step in range(total_steps + 1):
            angle = step * turn * (1 if clockwise else -1)
            level = math.floor(y + step * rise)
            facing = _spiral_facing(angle, clockwise)

            for r in range(radius - width + 1, radius + 1):
                sx = round_half_up(x + math.cos(angle) * r)
                sz = round_half_up(z + math.sin(angle) * r)
                if r == radius:
                    self.set(sx, level, sz, f"{materials.stairs}?facing={facing}")
                else:
                    self.set(sx, level, sz, inner)

        if pillar:
            for py in range(y, y + height + 1):
                self.set(x, py, z, pillar_type)

    def draw_hanging(
        self,
        x: int,
        y: int,
        z: int,
        *,
        length=5,
        length_variation=3,
        count=1,
        spread=0,
        type: str | Sequence[str] = "vine",
        tip_type: str | None = None,
        sway=0,
        sway_direction="random",
        seed=0,
    ):
        """Strands hanging down from (x, y, z): vines, chains, willow leaves."""

        types = _as_list(type)
        for strand in range(count):
            strand_seed = seed + strand * 97
            sx, sz = x, z
            if spread > 0:
                sx += self._offset(x, y, z, spread, strand_seed + _SEED_SPREAD_X)
                sz += self._offset(x, y, z, spread, strand_seed + _SEED_SPREAD_Z)
            strand_length = max(
                1,
                length
                + self._offset(sx, y, sz, length_variation, strand_seed + _SEED_LENGTH),
            )

            sway_dx = sway_dz = 0
            if sway > 0:
                if sway_direction == "random":
                    direction = self.pick_at(
                        sx, y, sz, list(_SWAY), strand_seed + _SEED_SWAY
                    )
                    sway_dx, sway_dz = _SWAY[direction]
                else:
                    sway_dx, sway_dz = _SWAY.get(sway_direction, (0, 0))

            current_x, current_z = sx, sz
            for j in range(strand_length):
                level = y - j
                if sway > 0 and j > 0:
                    shift = math.floor(j / strand_length * sway)
                    current_x = sx + sway_dx * shift
                    current_z = sz + sway_dz * shift

                if j == strand_length - 1 and tip_type:
                    block = tip_type
                else:
                    block = self.pick_at(
                        current_x, level, current_z, types, strand_seed + _SEED_TYPE
                    )
                self.set(current_x, level, current_z, block)

    def draw_hanging_ring(
        self,
        x: int,
        y: int,
        z: int,
        radius: int,
        *,
        density=0.5,
        inner_radius=0,
        seed=0,
        **options,
    ):
        options.pop("count", None)
        options.pop("spread", None)
        for dx in range(-radius, radius + 1):
            for dz in range(-radius, radius + 1):
                if not inner_radius <= math.hypot(dx, dz) <= radius:
                    continue
                if self.random_at(x + dx, y, z + dz, seed + _SEED_RING) < density:
                    self.draw_hanging(
                        x + dx, y, z + dz, count=1, spread=0, seed=seed, **options
                    )

    def scatter(
        self,
        x1: int,
        y: int,
        z1: int,
        x2: int,
        z2: int,
        density: float,
        types: str | Sequence[str],
        *,
        require_support=True,
        seed=0,
    ):
        self.scatter3d(
            x1,
            y,
            z1,
            x2,
            y,
            z2,
            density,
            types,
            require_support=require_support,
            seed=seed,
        )

    def scatter3d(
        self,
        x1: int,
        y1: int,
        z1: int,
        x2: int,
        y2: int,
        z2: int,
        density: float,
        types: str | Sequence[str] | None,
        *,
        require_support=True,
        seed=0,
    ):
        """Sprinkle blocks over empty cells, optionally only on top of something."""

        if not types:
            Console.warn("Nothing to scatter: no block types given.")
            return
        choices = _as_list(types)

        for x in range(min(x1, x2), max(x1, x2) + 1):
            for y in range(min(y1, y2), max(y1, y2) + 1):
                for z in range(min(z1, z2), max(z1, z2) + 1):
                    if self.random_at(x, y, z, seed + _SEED_SCATTER) >= density:
                        continue
                    if require_support and not self.get(x, y - 1, z):
                        continue
                    if self.get(x, y, z):
                        continue
                    block = self.pick_at(x, y, z, choices, seed + _SEED_TYPE)
                    self.set(x, y, z, block)

    def _offset(self, x: int, y: int, z: int, reach: int, seed: int) -> int:
        """Deterministic integer in [-reach, reach]."""

        return math.floor(self.random_at(x, y, z, seed) * (reach * 2 + 1)) - reach


def _spiral_facing(angle: float, clockwise: bool) -> str:
    angle = math.atan2(math.sin(angle), math.cos(angle))
    if -math.pi / 4 <= angle < math.pi / 4:
        quadrant = 0
    elif math.pi / 4 <= angle < 3 * math.pi / 4:
        quadrant = 1
    elif angle >= 3 * math.pi / 4 or angle < -3 * math.pi / 4:
        quadrant = 2
    else:
        quadrant = 3
    if clockwise:
        return ("south", "west", "north", "east")[quadrant]
    return ("north", "east", "south", "west")[quadrant]
