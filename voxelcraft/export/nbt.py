from __future__ import annotations

import gzip
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING

from nbtlib import ByteArray, Compound, File, String

from ..core.metadata import parse_properties

if TYPE_CHECKING:
    from ..core.blocks import BlockState


def block_compound(state: BlockState) -> Compound:
    """Palette entry: {Name, Properties?}."""

    entry = Compound({"Name": String(state.namespaced)})
    if properties := parse_properties(state.properties):
        entry["Properties"] = Compound({k: String(v) for k, v in properties.items()})
    return entry


def byte_array(data: bytes) -> ByteArray:
    return ByteArray(memoryview(data).cast("b").tolist())


def to_bytes(root: Compound, *, root_name="", gzipped=True) -> bytes:
    buffer = BytesIO()
    File(root, root_name=root_name).write(buffer)
    if gzipped:
        return gzip.compress(buffer.getvalue())
    return buffer.getvalue()


def write_output(path: Path, suffix: str, data: bytes) -> Path:
    # the name may contain dots, so the suffix is appended rather than replaced
    output = path.parent / f"{path.name}{suffix}"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data)
    return output
