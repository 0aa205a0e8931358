"""Static block tables shipped with the package."""

from __future__ import annotations

from functools import cache
from importlib.resources import files
from typing import TypeVar

from msgspec import Struct, json

T = TypeVar("T")

# maps block name to {latest version the rename applies to: old name or None}
Renames = dict[str, dict[str, "str | None"]]
Layout = dict[str, dict[str, int]]
RGBA = list[int]


class LegacyTable(Struct):
    names: dict[str, str]
    numeric: dict[str, str]


class MetadataTable(Struct):
    layouts: dict[str, Layout]
    categories: dict[str, str]


class SimilarityTable(Struct):
    colors: dict[str, list[str]]
    materials: dict[str, list[str]]
    added: dict[str, list[str]]
    baseline: list[str]


def _read(name: str, type: type[T]) -> T:
    data = (files("voxelcraft") / "data" / name).read_bytes()
    return json.decode(data, type=type)


@cache
def valid_blocks() -> frozenset[str]:
    return frozenset(_read("blocks.json", list[str]))


@cache
def renames() -> Renames:
    return _read("renames.json", dict[str, dict[str, str | None]])


@cache
def fallbacks() -> dict[str, str]:
    return _read("fallbacks.json", dict[str, str])


@cache
def legacy() -> LegacyTable:
    return _read("legacy.json", LegacyTable)


@cache
def metadata() -> MetadataTable:
    return _read("metadata.json", MetadataTable)


@cache
def similarity() -> SimilarityTable:
    return _read("similarity.json", SimilarityTable)


@cache
def colors() -> dict[str, RGBA]:
    return _read("colors.json", dict[str, list[int]])
