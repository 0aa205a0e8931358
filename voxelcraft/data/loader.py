from __future__ import annotations

from pathlib import Path
from sys import stdin

from click import UsageError
from msgspec import DecodeError, json

from ..core.script import ScriptError, run_script
from ..core.voxels import Voxel

# prevent infinite loop on infinite input (like `yes | voxelcraft build`)
MAX_PIPE_SIZE = 100 * 1024 * 1024  # 100 MB

SCRIPT_SUFFIXES = (".py", ".md", ".txt")

_decoder = json.Decoder(list[Voxel])


def load(path: Path | None) -> list[Voxel]:
    """Voxels from a build script or a JSON voxel list, file or stdin."""

    if path:
        return parse(path.read_bytes(), filename=path.name)

    if stdin.isatty():
        raise UsageError(
            "Missing input: Either provide file path with --in, or pipe content to stdin.",
        )
    return parse(stdin.buffer.read(MAX_PIPE_SIZE), filename="<stdin>")


def parse(data: bytes | bytearray, *, filename: str) -> list[Voxel]:
    if is_json(data, filename=filename):
        return decode(data)

    try:
        builder = run_script(bytes(data).decode(), filename=filename)
    except (ScriptError, UnicodeDecodeError) as e:
        raise UsageError(f"Build script failed: {e}")
    return builder.snapshot()


def is_json(data: bytes | bytearray, *, filename: str) -> bool:
    if filename.endswith(".json"):
        return True
    if filename.endswith(SCRIPT_SUFFIXES):
        return False
    return bytes(data).lstrip()[:1] in (b"[", b"{")


def decode(data: bytes | bytearray) -> list[Voxel]:
    try:
        return _decoder.decode(data)
    except DecodeError:
        raise UsageError("Input data does not match expected format.")
