from __future__ import annotations

import re
from datetime import datetime
from io import BytesIO
from typing import TYPE_CHECKING, Iterable
from zipfile import ZIP_DEFLATED, ZipFile

from msgspec import json

from ..core.versions import get_version
from .commands import merge_regions
from .grid import Grid, UnsupportedFormatError
from .nbt import write_output

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.voxels import Voxel

# a function file may hold at most 65536 commands
COMMANDS_PER_FILE = 60_000

_UNSAFE_NAMESPACE_CHARS = re.compile(r"[^a-z0-9_]")

_README = """\
Minecraft Structure Datapack
============================

Structure Name: {name}
Total Blocks: {blocks}
Generated: {generated}

INSTALLATION:
1. Place this ZIP file in your Minecraft world's datapacks folder:
   .minecraft/saves/[YourWorldName]/datapacks/

2. In-game, reload datapacks:
   /reload

3. Build the structure at your current position:
   /function {namespace}:build

4. (Optional) To remove the structure:
   /function {namespace}:clear

NOTES:
- The structure is placed relative to where you stand (~X ~Y ~Z)
- Make sure you have enough space around you
"""


def namespace(name: str) -> str:
    return _UNSAFE_NAMESPACE_CHARS.sub("_", name.lower())


def _tellraw(text: str, color: str) -> str:
    message = json.encode({"text": text, "color": color}).decode()
    return f"tellraw @a {message}"


def _function_files(
    commands: list[str], *, ns: str, label: str, blocks: int
) -> dict[str, str]:
    done = _tellraw(f"[Builder] Done! ({blocks} blocks)", "green")

    if len(commands) <= COMMANDS_PER_FILE:
        build = (
            f"# Generated Structure\n# Target: Minecraft {label}\n# Blocks: {blocks}\n\n"
        )
        build += "\n".join(commands)
        build += f"\n\n# Success\n{done}"
        return {"build": build}

    parts = [
        commands[i : i + COMMANDS_PER_FILE]
        for i in range(0, len(commands), COMMANDS_PER_FILE)
    ]
    files = {
        f"build_part{i}": "\n".join(part) for i, part in enumerate(parts, start=1)
    }
    build = f"# Multi-part build\n# Parts: {len(parts)}\n# Blocks: {blocks}\n\n"
    for i in range(1, len(parts) + 1):
        build += f"function {ns}:build_part{i}\n"
    build += f"\n# Success\n{done}"
    return {"build": build} | files


def encode_datapack(
    voxels: Iterable[Voxel] | Grid, version: str = "1.21", *, name="structure"
) -> bytes:
    """Zipped datapack with build, load and clear functions."""

    profile = get_version(version)
    if not profile.supports_datapack:
        raise UnsupportedFormatError(
            f"Minecraft {profile.label} does not support datapacks."
        )

    grid = Grid.of(voxels)
    ns = namespace(name)
    function_dir = f"data/{ns}/{profile.datapack_function_dir}"
    commands = merge_regions(grid, profile.id)
    bounds = grid.bounds

    files = {
        "pack.mcmeta": json.format(
            json.encode({
                "pack": {
                    "pack_format": profile.pack_format,
                    "description": f"{name}\nFor Minecraft {profile.label}",
                }
            }),
            indent=4,
        ).decode(),
        "data/minecraft/tags/function/load.json": json.format(
            json.encode({"values": [f"{ns}:load"]}), indent=2
        ).decode(),
        "README.txt": _README.format(
            name=name,
            blocks=len(grid),
            generated=datetime.now().strftime("%Y-%m-%d %H:%M"),
            namespace=ns,
        ),
    }

    functions = _function_files(commands, ns=ns, label=profile.label, blocks=len(grid))
    functions["load"] = "\n".join([
        "# Loaded",
        _tellraw("[Info] Datapack Ready!", "aqua"),
        _tellraw(f"Use: /function {ns}:build", "yellow"),
    ])
    functions["clear"] = "\n".join([
        "# Clear",
        f"fill ~{bounds.min_x} ~{bounds.min_y} ~{bounds.min_z} "
        f"~{bounds.max_x} ~{bounds.max_y} ~{bounds.max_z} air",
        _tellraw("[Info] Structure Cleared", "red"),
    ])
    for function, content in functions.items():
        files[f"{function_dir}/{function}.mcfunction"] = content

    buffer = BytesIO()
    with ZipFile(buffer, "w", ZIP_DEFLATED, compresslevel=9) as archive:
        for filename, content in files.items():
            archive.writestr(filename, content)
    return buffer.getvalue()


def export_datapack(voxels: Iterable[Voxel], path: Path, version: str = "1.21") -> Path:
    return write_output(path, ".zip", encode_datapack(voxels, version, name=path.name))
