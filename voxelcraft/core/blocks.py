from __future__ import annotations

import re
from functools import cache
from typing import NamedTuple

from ..cli.console import Console
from ..data import tables
from .metadata import parse_properties, properties_to_metadata
from .versions import VersionProfile, compare_versions, get_version

SEMANTIC_ALIASES = {
    "wall_stone": "stone_bricks",
    "wall_wood": "oak_planks",
    "wall_brick": "bricks",
    "wall_white": "white_concrete",
    "wall_gray": "gray_concrete",
    "roof_stone": "stone_brick_stairs",
    "roof_wood": "dark_oak_stairs",
    "roof_red": "bricks",
    "floor_stone": "stone_bricks",
    "floor_wood": "oak_planks",
    "frame_wood": "stripped_oak_log",
    "window": "glass_pane",
    "wood": "oak_planks",
    "log": "oak_log",
    "leaves": "oak_leaves",
    "plank": "oak_planks",
    "brick": "bricks",
    "glass_block": "glass",
    "stone_brick": "stone_bricks",
}

# common misspellings that are not worth a warning
NAME_FIXES = {
    "stone_brick": "stone_bricks",
    "nether_brick": "nether_bricks",
    "mud_brick": "mud_bricks",
    "oak_wood": "oak_log",
    "spruce_wood": "spruce_log",
}

_SEMANTIC_PREFIX = re.compile(r"^(WALL_|ROOF_|FLOOR_|FRAME_)")
_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9_\[\]=,]")
_INVALID_PROPERTY_CHARS = re.compile(r"[^a-zA-Z0-9_=,]")
_NON_ASCII = re.compile(r"[^\x00-\x7f]")


class BlockState(NamedTuple):
    """Version-converted block name with its sanitized properties."""

    name: str
    properties: str | None

    @property
    def namespaced(self) -> str:
        return f"minecraft:{self.name}"

    def __str__(self):
        if self.properties:
            return f"{self.namespaced}[{self.properties}]"
        return self.namespaced


def format_block(
    type: str, properties: str | None = None, version: str = "1.21"
) -> str:
    """Block identifier as accepted by setblock/fill in the target version."""

    return _format_block(str(type), properties or None, version)


def resolve_block_state(
    type: str, properties: str | None = None, version: str = "1.21"
) -> BlockState:
    """Modern block state for containers that store names, for any version."""

    return _resolve_block_state(str(type), properties or None, version)


def convert_for_version(name: str, version: str) -> str:
    clean = name.removeprefix("minecraft:").split("[")[0]
    for max_version, old_name in tables.renames().get(clean, {}).items():
        if compare_versions(version, max_version) >= 0:
            if old_name is None:
                return tables.fallbacks().get(clean, "stone")
            return old_name
    return clean


@cache
def _format_block(type: str, properties: str | None, version: str) -> str:
    profile = get_version(version)
    clean, inline_properties = _clean_type(type, profile)
    if properties is None:
        properties = inline_properties
    converted = convert_for_version(clean, profile.id)

    if profile.uses_numeric_ids:
        block_id = _format_legacy(clean, converted, properties)
    else:
        block_id = "minecraft:" + _INVALID_NAME_CHARS.sub("", converted)
        if (sanitized := _sanitize_properties(properties)) and "[" not in block_id:
            block_id += f"[{sanitized}]"

    return _NON_ASCII.sub("", block_id)


@cache
def _resolve_block_state(
    type: str, properties: str | None, version: str
) -> BlockState:
    profile = get_version(version)
    clean, inline_properties = _clean_type(type, profile)
    if properties is None:
        properties = inline_properties
    converted = convert_for_version(clean, profile.id)
    name = _NON_ASCII.sub("", re.sub(r"[^a-z0-9_]", "", converted)) or "stone"
    return BlockState(name, _sanitize_properties(properties))


def _clean_type(type: str, profile: VersionProfile) -> tuple[str, str | None]:
    raw = _SEMANTIC_PREFIX.sub("", type.strip()).lower()
    raw = SEMANTIC_ALIASES.get(raw, raw)

    if profile.is_latest:
        if raw in ("grass", "minecraft:grass"):
            raw = "short_grass"
    elif raw in ("short_grass", "minecraft:short_grass"):
        raw = "grass"
    if raw in ("snow", "minecraft:snow"):
        raw = "snow_block"

    clean = raw.replace("minecraft:", "")
    base, bracket, inline = clean.partition("[")
    inline_properties = inline.rstrip("]") if bracket else None

    if base not in tables.valid_blocks():
        if base in NAME_FIXES:
            base = NAME_FIXES[base]
        else:
            Console.warn("Unknown block {block}, using stone.", block=raw)
            base = "stone"

    return base, inline_properties or None


def _format_legacy(clean: str, converted: str, properties: str | None) -> str:
    legacy = tables.legacy()
    name = legacy.names.get(converted) or legacy.names.get(clean) or converted

    data_value = 0
    numeric_id = legacy.numeric.get(converted) or legacy.numeric.get(clean)
    if numeric_id and ":" in numeric_id:
        try:
            data_value = int(numeric_id.split(":")[1])
        except ValueError:
            data_value = 0

    if properties and properties.strip() and properties != "0":
        meta = properties_to_metadata(clean, parse_properties(properties))
        if meta > 0:
            data_value = meta

    if data_value > 0:
        return f"{name} {data_value}"
    return name


def _sanitize_properties(properties: str | None) -> str | None:
    if not properties or properties == "0":
        return None

    stripped = "".join(properties.split())
    if stripped.endswith(","):
        stripped = stripped[:-1]
    sanitized = _INVALID_PROPERTY_CHARS.sub("", stripped)
    if "=" not in sanitized:
        return None
    return sanitized
