from __future__ import annotations

from ..data import tables


def parse_properties(properties: str | None) -> dict[str, str]:
    """Parse "k=v,k=v" into a dict, dropping malformed pairs."""

    if not properties:
        return {}

    result: dict[str, str] = {}
    for pair in "".join(properties.split()).split(","):
        key, _, value = pair.partition("=")
        if key and value:
            result[key] = value
    return result


def properties_to_metadata(block: str, properties: dict[str, str] | None) -> int:
    """Pack block-state properties into a pre-1.13 data value (0-15)."""

    if not isinstance(properties, dict) or not properties:
        return 0

    table = tables.metadata()
    category = table.categories.get(block)
    if not category:
        return 0

    if category == "door":
        if properties.get("half") == "upper":
            return 8 + _sum_layout(
                table.layouts["door_upper"], properties, only=("hinge", "powered")
            )
        return _sum_layout(
            table.layouts["door_lower"], properties, only=("facing", "open")
        )

    layout = table.layouts.get(category)
    if not layout:
        return 0
    return _sum_layout(layout, properties)


def _sum_layout(
    layout: tables.Layout,
    properties: dict[str, str],
    *,
    only: tuple[str, ...] | None = None,
) -> int:
    total = 0
    for name, value in properties.items():
        if only is not None and name not in only:
            continue
        total += layout.get(name, {}).get(value, 0)
    return total
