from __future__ import annotations

import math
from typing import Literal

from .canvas import Canvas
from .materials import stair_set

PolyRoofStyle = Literal["cone", "dome", "curve", "asian", "steep"]

ROOF_MATERIALS = {
    "ROOF_WOOD": "spruce_stairs",
    "ROOF_DARK": "dark_oak_stairs",
    "ROOF_DARK_OAK": "dark_oak_stairs",
    "ROOF_BAMBOO": "bamboo_stairs",
    "ROOF_STONE": "stone_brick_stairs",
    "ROOF_DEEPSLATE": "deepslate_tile_stairs",
    "ROOF_BLACKSTONE": "polished_blackstone_brick_stairs",
    "ROOF_RED": "red_nether_brick_stairs",
    "ROOF_BLUE": "dark_prismarine_stairs",
    "ROOF_GREEN": "mossy_stone_brick_stairs",
    "ROOF_PURPLE": "purpur_stairs",
    "ROOF_GOLD": "sandstone_stairs",
    "ROOF_COPPER": "cut_copper_stairs",
}

ROOF_STYLES = ("straight", "curve", "arch", "gambrel", "gable", "pyramid")

DEFAULT_ROOF_PRIORITY = 60


def _radius_factor(style: str, t: float) -> float:
    if style == "dome":
        return math.sqrt(max(0, 1 - t * t))
    if style in ("curve", "asian"):
        return (1 - t) ** 1.5
    if style == "steep":
        return 1 - t**0.7
    return 1 - t


def _polygon_edge(sides: int, angle: float) -> float:
    """Polygon boundary distance at `angle`, relative to its circumradius."""

    if sides < 3:
        return 1.0
    sector = 2 * math.pi / sides
    alpha = angle % sector - sector / 2
    return math.cos(sector / 2) / math.cos(alpha)


def _stair_facing(angle: float) -> str:
    # stairs on a ring face the center
    if -math.pi / 4 <= angle < math.pi / 4:
        return "west"
    if math.pi / 4 <= angle < 3 * math.pi / 4:
        return "north"
    if angle >= 3 * math.pi / 4 or angle < -3 * math.pi / 4:
        return "east"
    return "south"


class Roofs(Canvas):
    def draw_poly_roof(
        self,
        x: int,
        y: int,
        z: int,
        radius: float,
        height: int,
        sides: int,
        style: PolyRoofStyle = "cone",
        type: str = "oak_stairs",
    ):
        """Round or polygonal roof, stairs on the outer ring and solid inside.

        Each layer is a ring of the regular `sides`-gon (round below 3 sides).
        """

        materials = stair_set(type)
        layer_count = max(height, 2)

        # (x, y, z) -> facing, or None for a solid block
        blocks: dict[tuple[int, int, int], str | None] = {}
        for layer in range(layer_count + 1):
            t = layer / layer_count
            current_y = math.floor(y + t * height)
            current_r = radius * _radius_factor(style, t)
            if current_r < 0.3:
                continue

            thickness = max(1, math.ceil(current_r * 0.25))
            inner_r = max(0, current_r - thickness)
            extent = math.ceil(current_r) + 1
            for dx in range(-extent, extent + 1):
                for dz in range(-extent, extent + 1):
                    dist = math.hypot(dx, dz)
                    edge = _polygon_edge(sides, math.atan2(dz, dx))
                    if not inner_r * edge - 0.5 < dist <= current_r * edge + 0.5:
                        continue
                    is_edge = dist > current_r * edge - 1
                    facing = None
                    if is_edge and materials.stairs != materials.solid:
                        facing = _stair_facing(math.atan2(dz, dx))
                    blocks[(x + dx, current_y, z + dz)] = facing

        # stairs boxed in on 3 or more sides are solid
        for (bx, by, bz), facing in list(blocks.items()):
            if facing is None:
                continue
            neighbours = sum(
                (bx + ox, by, bz + oz) in blocks
                for ox, oz in ((1, 0), (-1, 0), (0, 1), (0, -1))
            )
            if neighbours >= 3:
                blocks[(bx, by, bz)] = None

        # only the top of each column may be a stair
        column_top: dict[tuple[int, int], int] = {}
        for bx, by, bz in blocks:
            column_top[(bx, bz)] = max(by, column_top.get((bx, bz), by))
        for (bx, by, bz), facing in blocks.items():
            if facing is not None and by < column_top[(bx, bz)]:
                blocks[(bx, by, bz)] = None

        for (bx, by, bz), facing in blocks.items():
            if facing is None:
                self.set(bx, by, bz, materials.solid)
            else:
                self.set(bx, by, bz, f"{materials.stairs}?facing={facing}")

        if style in ("curve", "steep", "asian"):
            finial = materials.solid.split("_")[0] + "_fence"
            self.set(x, y + height, z, finial)

    def draw_roof_bounds(
        self,
        x1: int,
        y: int,
        z1: int,
        x2: int,
        z2: int,
        height: int,
        style: str,
        type: str,
        *,
        gable: str | None = None,
        gable_offset: int = 1,
        ridge: str | None = None,
    ):
        """Straight-slope roof over the footprint (x1, z1)-(x2, z2), ridge along Z.

        `gable` fills the triangular end walls, `ridge` caps the peak.
        """

        min_x, max_x = sorted((x1, x2))
        min_z, max_z = sorted((z1, z2))
        if type and type.startswith("ROOF_"):
            type = ROOF_MATERIALS.get(type, "dark_oak_stairs")

        self._draw_roof(
            min_x,
            y,
            min_z,
            max_x - min_x + 1,
            max_z - min_z + 1,
            height,
            style,
            type,
            gable=gable,
            gable_offset=gable_offset,
            ridge=ridge,
        )

    def _draw_roof(
        self,
        x: int,
        y: int,
        z: int,
        width: int,
        depth: int,
        height: int,
        style: str,
        type: str,
        *,
        gable: str | None,
        gable_offset: int,
        ridge: str | None,
    ):
        if type in ROOF_STYLES and style not in ROOF_STYLES:
            raise ValueError(
                f"Roof style and material look swapped ({style!r}, {type!r}); "
                + "expected style first, then material."
            )

        if height <= 0:
            return

        materials = stair_set(type)
        half_width = width // 2
        is_odd = width % 2 == 1
        slope = height / max(half_width, 1)
        priority = self.current_priority or DEFAULT_ROOF_PRIORITY

        east = f"{materials.stairs}?facing=east"
        west = f"{materials.stairs}?facing=west"

        def place_pair(layer: int, level: int, left: str, right: str):
            x_left = x + layer
            x_right = x + width - 1 - layer
            if x_left > x_right:
                return
            for z_pos in range(z, z + depth):
                self.set(x_left, level, z_pos, left, priority=priority)
                if x_right > x_left:
                    self.set(x_right, level, z_pos, right, priority=priority)

        if slope >= 1:
            last_layer = half_width if is_odd else half_width - 1
            previous_y = y - 1
            current_y = y
            for layer in range(last_layer + 1):
                current_y = y + math.floor(layer * slope)
                place_pair(layer, current_y, east, west)
                # solid under each stair down to the previous step
                for fill_y in range(previous_y + 1, current_y):
                    place_pair(layer, fill_y, materials.solid, materials.solid)
                previous_y = current_y

            if not is_odd:
                top_y = y + math.floor(half_width * slope)
                for fill_y in range(current_y + 1, top_y):
                    place_pair(half_width - 1, fill_y, materials.solid, materials.solid)
                place_pair(half_width - 1, top_y, east, west)
        else:
            for rel_y in range(height + 1):
                level = y + rel_y
                first = math.floor(rel_y / slope)
                if rel_y < height:
                    last = math.floor((rel_y + 1) / slope) - 1
                else:
                    last = half_width
                for layer in range(first, min(last, half_width) + 1):
                    if layer >= last or rel_y == height:
                        place_pair(layer, level, east, west)
                    else:
                        place_pair(layer, level - 1, materials.solid, materials.solid)

        if gable:
            gable_priority = priority - 10
            z_front = z + gable_offset
            z_back = z + depth - 1 - gable_offset
            for rel_y in range(math.ceil(half_width * slope)):
                level = y + rel_y
                layer = math.floor(rel_y / slope)
                x_left = x + layer + 1
                x_right = x + width - 2 - layer
                if x_left <= x_right:
                    columns = range(x_left, x_right + 1)
                elif is_odd:
                    center_x = math.floor(x + width / 2)
                    columns = range(center_x, center_x + 1)
                else:
                    continue
                for gx in columns:
                    self.set(gx, level, z_front, gable, priority=gable_priority)
                    self.set(gx, level, z_back, gable, priority=gable_priority)

        if ridge:
            ridge_priority = priority + 5
            peak_y = y + math.floor(half_width * slope)
            center_x = math.floor(x + width / 2)
            if is_odd:
                cells = ((center_x, peak_y),)
            else:
                cells = ((center_x - 1, peak_y + 1), (center_x, peak_y + 1))
            for z_pos in range(z, z + depth):
                for cx, cy in cells:
                    self.set(cx, cy, z_pos, ridge, priority=ridge_priority)
