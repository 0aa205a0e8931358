from __future__ import annotations

import math
from typing import Sequence

from .canvas import Canvas, round_half_up

Point = tuple[float, float, float]


class InverseRotation:
    """Maps world offsets back into a shape's local, unrotated frame.

    Undoes the Z rotation first, then Y, then X (angles in degrees).
    """

    def __init__(self, rotate_x: float = 0, rotate_y: float = 0, rotate_z: float = 0):
        self.active = bool(rotate_x or rotate_y or rotate_z)
        rx, ry, rz = map(math.radians, (rotate_x, rotate_y, rotate_z))
        self._cos_x, self._sin_x = math.cos(rx), math.sin(rx)
        self._cos_y, self._sin_y = math.cos(ry), math.sin(ry)
        self._cos_z, self._sin_z = math.cos(rz), math.sin(rz)

    def __call__(self, dx: float, dy: float, dz: float) -> Point:
        x1 = dx * self._cos_z + dy * self._sin_z
        y1 = -dx * self._sin_z + dy * self._cos_z
        z1 = dz
        x2 = x1 * self._cos_y - z1 * self._sin_y
        z2 = x1 * self._sin_y + z1 * self._cos_y
        y3 = y1 * self._cos_x + z2 * self._sin_x
        z3 = -y1 * self._sin_x + z2 * self._cos_x
        return x2, y3, z3


def _cube(bound: int):
    for dx in range(-bound, bound + 1):
        for dy in range(-bound, bound + 1):
            for dz in range(-bound, bound + 1):
                yield dx, dy, dz


class Shapes(Canvas):
    def draw_ellipsoid(
        self,
        x: int,
        y: int,
        z: int,
        rx: float,
        ry: float,
        rz: float,
        type: str,
        *,
        hollow=False,
        noise: dict | None = None,
        rotate_x: float = 0,
        rotate_y: float = 0,
        rotate_z: float = 0,
    ):
        params = self._noise_params(noise)
        rotation = InverseRotation(rotate_x, rotate_y, rotate_z)
        max_r = max(rx, ry, rz) + (params[0] * 2 if params else 0)
        inner = (rx - 1, ry - 1, rz - 1)

        for dx in range(math.floor(-max_r), math.ceil(max_r) + 1):
            for dy in range(math.floor(-max_r), math.ceil(max_r) + 1):
                for dz in range(math.floor(-max_r), math.ceil(max_r) + 1):
                    lx, ly, lz = rotation(dx, dy, dz)
                    offset = 0.0
                    if params:
                        amount, scale = params
                        offset = self._noise3d(lx, ly, lz, scale) * amount

                    dist = _axis(lx, rx) + _axis(ly, ry) + _axis(lz, rz) - offset
                    if dist > 1:
                        continue
                    if hollow and all(r > 0 for r in inner):
                        irx, iry, irz = inner
                        inner_dist = (
                            (lx / irx) ** 2 + (ly / iry) ** 2 + (lz / irz) ** 2 - offset
                        )
                        if inner_dist <= 1:
                            continue
                    self.set(x + dx, y + dy, z + dz, type)

    def draw_sphere(self, x: int, y: int, z: int, radius: float, type: str, **kwargs):
        self.draw_ellipsoid(x, y, z, radius, radius, radius, type, **kwargs)

    def draw_cylinder(
        self,
        x: int,
        y: int,
        z: int,
        radius: float,
        height: int,
        type: str,
        *,
        hollow=False,
        thickness: float = 1,
        axis="y",
        noise: dict | None = None,
        rotate_x: float = 0,
        rotate_y: float = 0,
        rotate_z: float = 0,
    ):
        params = self._noise_params(noise)
        rotation = InverseRotation(rotate_x, rotate_y, rotate_z)

        def inside(lx: float, ly: float, lz: float) -> bool:
            dist = math.hypot(lx, lz)
            if params:
                amount, scale = params
                dist -= self._noise3d(lx, ly, lz, scale) * amount * radius
            if hollow:
                return radius - thickness <= dist <= radius
            return dist <= radius

        if rotation.active:
            noise_expand = params[0] * 2 if params else 0
            bound = math.ceil(max(radius, height / 2) + noise_expand + height / 2)
            for dx, dy, dz in _cube(bound):
                lx, ly, lz = rotation(dx, dy - height / 2, dz)
                local_y = ly + height / 2
                if 0 <= local_y < height and inside(lx, local_y, lz):
                    self.set(x + dx, y + dy, z + dz, type)
            return

        extent = math.ceil(radius + (params[0] * 2 if params else 0))
        for dx in range(-extent, extent + 1):
            for dz in range(-extent, extent + 1):
                for dy in range(height):
                    if not inside(dx, dy, dz):
                        continue
                    if axis == "x":
                        self.set(x + dy, y + dx, z + dz, type)
                    elif axis == "z":
                        self.set(x + dx, y + dz, z + dy, type)
                    else:
                        self.set(x + dx, y + dy, z + dz, type)

    def draw_polygon(
        self,
        x: int,
        y: int,
        z: int,
        radius: float,
        sides: int,
        height: int,
        type: str,
        *,
        hollow=False,
        thickness: float = 1,
        rotation: float = 0,
        noise: dict | None = None,
        rotate_x: float = 0,
        rotate_y: float = 0,
        rotate_z: float = 0,
    ):
        """Regular polygon prism; `rotation` turns the polygon about its own axis."""

        if sides < 3:
            return

        params = self._noise_params(noise)
        inverse = InverseRotation(rotate_x, rotate_y, rotate_z)
        offset_angle = math.radians(rotation)
        sector = 2 * math.pi / sides
        noise_expand = params[0] * 2 if params else 0

        def inside(lx: float, ly: float, lz: float) -> bool:
            angle = (math.atan2(lz, lx) - offset_angle) % (2 * math.pi)
            alpha = angle - (math.floor(angle / sector) * sector + sector / 2)
            edge = math.cos(sector / 2) / math.cos(alpha)
            max_dist = radius * edge
            inner_dist = (radius - thickness) * edge
            if params:
                amount, scale = params
                jitter = self._noise3d(lx, ly, lz, scale) * amount * radius * 0.3
                max_dist += jitter
                inner_dist += jitter
            dist = math.hypot(lx, lz)
            if hollow:
                return inner_dist < dist <= max_dist
            return dist <= max_dist

        if inverse.active:
            bound = math.ceil(max(radius, height / 2) + noise_expand + height / 2)
            for dx, dy, dz in _cube(bound):
                lx, ly, lz = inverse(dx, dy - height / 2, dz)
                local_y = ly + height / 2
                if 0 <= local_y < height and inside(lx, local_y, lz):
                    self.set(x + dx, y + dy, z + dz, type)
            return

        extent = math.ceil(radius + noise_expand)
        for dx in range(-extent, extent + 1):
            for dz in range(-extent, extent + 1):
                for dy in range(height):
                    if inside(dx, dy, dz):
                        self.set(x + dx, y + dy, z + dz, type)

    def draw_torus(
        self,
        x: int,
        y: int,
        z: int,
        major_radius: float,
        minor_radius: float,
        type: str,
        *,
        axis="y",
        noise: dict | None = None,
        rotate_x: float = 0,
        rotate_y: float = 0,
        rotate_z: float = 0,
    ):
        params = self._noise_params(noise)
        rotation = InverseRotation(rotate_x, rotate_y, rotate_z)
        noise_expand = params[0] * 2 if params else 0
        total_r = math.ceil(major_radius + minor_radius + 1 + noise_expand)

        def inside(ring_a: float, ring_b: float, across: float, sample: Point) -> bool:
            to_ring = math.hypot(ring_a, ring_b) - major_radius
            tube = to_ring**2 + across**2
            if params:
                amount, scale = params
                tube -= self._noise3d(*sample, scale) * amount * minor_radius**2
            return tube <= minor_radius**2

        if rotation.active:
            for dx, dy, dz in _cube(total_r):
                lx, ly, lz = rotation(dx, dy, dz)
                if inside(lx, lz, ly, (lx, ly, lz)):
                    self.set(x + dx, y + dy, z + dz, type)
            return

        # only the axis the ring turns around is as thin as the tube
        tube_r = math.ceil(minor_radius + noise_expand)
        reach_x = tube_r if axis == "x" else total_r
        reach_y = tube_r if axis not in ("x", "z") else total_r
        reach_z = tube_r if axis == "z" else total_r
        for dx in range(-reach_x, reach_x + 1):
            for dy in range(-reach_y, reach_y + 1):
                for dz in range(-reach_z, reach_z + 1):
                    sample = (dx, dy, dz)
                    if axis == "x":
                        placed = inside(dy, dz, dx, sample)
                    elif axis == "z":
                        placed = inside(dx, dy, dz, sample)
                    else:
                        placed = inside(dx, dz, dy, sample)
                    if placed:
                        self.set(x + dx, y + dy, z + dz, type)

    def draw_pyramid(
        self,
        x: int,
        y: int,
        z: int,
        base_size: float,
        height: int,
        type: str,
        *,
        filled=True,
        noise: dict | None = None,
        rotate_x: float = 0,
        rotate_y: float = 0,
        rotate_z: float = 0,
    ):
        params = self._noise_params(noise)
        rotation = InverseRotation(rotate_x, rotate_y, rotate_z)

        if rotation.active:
            noise_expand = params[0] * 2 if params else 0
            bound = math.ceil(max(base_size / 2, height) + noise_expand)
            for dx, dy, dz in _cube(bound):
                lx, ly, lz = rotation(dx, dy, dz)
                if not 0 <= ly < height:
                    continue
                half = base_size * (1 - ly / height) / 2
                if params:
                    amount, scale = params
                    half += self._noise3d(lx, ly, lz, scale) * amount * half * 0.5
                dist = max(abs(lx), abs(lz))
                if dist <= half and (filled or dist >= half - 1):
                    self.set(x + dx, y + dy, z + dz, type)
            return

        for level in range(height):
            half = math.floor(base_size * (1 - level / height) / 2)
            if not params:
                box = (x - half, y + level, z - half, x + half, y + level, z + half)
                if filled:
                    self.fill(*box, type)
                else:
                    self.walls(*box, type)
                continue

            amount, scale = params
            for dx in range(-half - 1, half + 2):
                for dz in range(-half - 1, half + 2):
                    dist = max(abs(dx), abs(dz))
                    jitter = self._noise3d(dx, level, dz, scale) * amount * half * 0.5
                    noisy = half + jitter
                    if dist <= noisy and (filled or dist >= noisy - 1):
                        self.set(x + dx, y + level, z + dz, type)

    def draw_bezier(self, points: Sequence[Sequence[float]], type: str, width: int = 1):
        """Quadratic (3 points) or cubic (4 points) curve through `(x, y, z)` points."""

        points = [tuple(p) for p in points]
        if len(points) < 3:
            if len(points) == 2:
                start, end = points
                self.line(
                    *(round_half_up(c) for c in start),
                    *(round_half_up(c) for c in end),
                    type,
                )
            return

        chord = sum(math.dist(a, b) for a, b in zip(points, points[1:]))
        segments = max(1, math.ceil(chord * 2))
        previous = points[0]
        self._stamp(previous, type, width)

        for i in range(1, segments + 1):
            current = _bezier_point(points, i / segments)
            self.line(
                *(round_half_up(c) for c in previous),
                *(round_half_up(c) for c in current),
                type,
            )
            if width > 1:
                self._stamp(current, type, width)
            previous = current

    def _stamp(self, center: Sequence[float], type: str, width: int):
        if width <= 1:
            return
        cx, cy, cz = (round_half_up(c) for c in center)
        radius = width / 2
        reach = math.ceil(radius)
        for dx in range(-reach, reach + 1):
            for dz in range(-reach, reach + 1):
                if dx * dx + dz * dz <= radius * radius:
                    self.set(cx + dx, cy, cz + dz, type)


def _axis(offset: float, radius: float) -> float:
    """Squared normalized offset; a zero radius is a single flat layer."""

    if radius:
        return (offset / radius) ** 2
    return 0.0 if abs(offset) < 0.5 else math.inf


def _bezier_point(points: Sequence[Point], t: float) -> Point:
    mt = 1 - t
    if len(points) == 3:
        weights = (mt * mt, 2 * mt * t, t * t)
    else:
        weights = (mt**3, 3 * mt * mt * t, 3 * mt * t * t, t**3)
    x, y, z = (sum(w * p[axis] for w, p in zip(weights, points)) for axis in range(3))
    return x, y, z
