from __future__ import annotations

from typing import Any, Callable

from ..cli.console import Console
from .canvas import Canvas
from .direction import get_rotation, rotate_facing
from .voxels import TypeSpec

ComponentBuilder = Callable[[Any, dict], None]


class Components(Canvas):
    def __init__(self):
        super().__init__()
        self.components: dict[str, ComponentBuilder] = {}

    def define_component(self, name: str, build: ComponentBuilder):
        """Register `build(builder, params)` as a reusable template."""

        self.components[name] = build

    def place_component(
        self,
        name: str,
        x: int,
        y: int,
        z: int,
        params: dict | None = None,
        *,
        rotate_y: int = 0,
        group_name: str | None = None,
    ):
        build = self.components.get(name)
        if not build:
            Console.warn("Component {name} is not defined.", name=name)
            return

        rotation = get_rotation(rotate_y)
        if rotation is None:
            Console.warn(
                "Component rotation must be a multiple of 90, got {angle}; ignored.",
                angle=rotate_y,
            )
            rotation = get_rotation(0)
        assert rotation is not None

        # a fresh builder of the same kind, sharing nothing but the templates
        template = type(self)()
        template.components = dict(self.components)
        build(template, params or {})

        previous_group = self.current_group
        previous_priority = self.current_priority
        self.begin_group(f"{group_name or name}_{x}_{z}")

        # positions turn the opposite way to facings
        position_rotation = rotation.conjugate()
        for voxel in template.snapshot():
            dx, dy, dz = voxel.position
            dx, dz = position_rotation.rotate((dx, dz))
            properties = voxel.properties
            if properties:
                properties = rotate_facing(properties, rotation)
            spec = TypeSpec(voxel.type, voxel.mode, properties)
            self.set(x + dx, y + dy, z + dz, str(spec), priority=voxel.priority)

        self.current_group = previous_group
        self.current_priority = previous_priority
