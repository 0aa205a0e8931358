from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from click import UsageError
from typer import Context, Option

from .. import APP_NAME, __version__
from ..data import loader, watcher
from ..export.formats import Format
from .console import Console
from .progress_bar import UserCancelled

if TYPE_CHECKING:
    from ..export.exporter import ExportConfig


class Version(Enum):
    v1_21 = "1.21"
    v1_20 = "1.20"
    v1_19 = "1.19"
    v1_18 = "1.18"
    v1_17 = "1.17"
    v1_16 = "1.16"
    v1_15 = "1.15"
    v1_14 = "1.14"
    v1_13 = "1.13"
    v1_12 = "1.12"
    v1_11 = "1.11"
    v1_9 = "1.9-1.10"
    v1_8 = "1.8"


def _show_version(ctx: Context, value: bool):
    if value:
        print(__version__)
        ctx.exit()


def _show_help(ctx: Context, value: bool):
    if value:
        typer.echo(ctx.get_help())
        ctx.exit()


def build(
    input_path: Annotated[
        Path | None,
        Option(
            "--in",
            "-i",
            help="Build script (.py, .md, .txt) or voxel list (.json)",
            show_default="read from stdin",
            metavar="file",
            rich_help_panel="Input & output",
            exists=True,
            file_okay=True,
            dir_okay=False,
        ),
    ] = None,
    out_dir: Annotated[
        Path,
        Option(
            "--out",
            "-o",
            help="Directory to write the exported files to",
            show_default="current directory",
            metavar="directory",
            rich_help_panel="Input & output",
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
        ),
    ] = Path("."),
    name: Annotated[
        str | None,
        Option(
            "--name",
            "-n",
            help="Structure name, also the output file name",
            show_default="input file name",
            rich_help_panel="Input & output",
        ),
    ] = None,
    watch: Annotated[
        bool,
        Option(
            "--watch",
            help="Watch input and export again on changes",
            rich_help_panel="Input & output",
        ),
    ] = False,
    version: Annotated[
        Version,
        Option(
            "--mc",
            "-m",
            help="Target Minecraft version",
            rich_help_panel="Export",
        ),
    ] = Version.v1_21,
    formats: Annotated[
        list[Format] | None,
        Option(
            "--format",
            "-f",
            help="Output format; repeat for more than one",
            show_default="all formats the version supports",
            rich_help_panel="Export",
            case_sensitive=False,
        ),
    ] = None,
    author: Annotated[
        str,
        Option(
            "--author",
            help="Author stored in schematic metadata",
            rich_help_panel="Export",
        ),
    ] = APP_NAME,
    _version: Annotated[
        bool,
        Option("--version", is_eager=True, hidden=True, callback=_show_version),
    ] = False,
    _help: Annotated[
        bool,
        Option("--help", is_eager=True, hidden=True, callback=_show_help),
    ] = False,
):
    """Export a structure to Minecraft formats."""

    from ..export.exporter import ExportConfig

    config = ExportConfig(
        out_dir=out_dir,
        name=name or (input_path.stem if input_path else "structure"),
        version=version.value,
        formats=tuple(dict.fromkeys(formats or Format.supported(version.value))),
        author=author,
    )
    try:
        if watch:
            _export_on_change(config, input_path)
        else:
            _export_once(config, input_path)
    except UsageError as e:
        e.show()
        raise typer.Exit(code=e.exit_code)
    except UserCancelled:
        raise typer.Exit()


def _export_once(config: ExportConfig, input_path: Path | None):
    from ..export.cache import ExportCache
    from ..export.exporter import Exporter
    from ..export.grid import EmptyStructureError, UnsupportedFormatError

    ExportCache.delete(config)
    voxels = loader.load(input_path)
    try:
        Exporter(config).export(voxels)
    except (EmptyStructureError, UnsupportedFormatError) as e:
        raise UsageError(str(e))


def _export_on_change(config: ExportConfig, input_path: Path | None):
    from ..export.cache import ExportCache
    from ..export.exporter import Exporter
    from ..export.grid import EmptyStructureError, UnsupportedFormatError

    exporter = Exporter(config)
    cache = ExportCache(config)
    is_first_run = True
    for voxels in watcher.watch(input_path):
        try:
            exporter.export(voxels, cache=cache)
        except (EmptyStructureError, UnsupportedFormatError) as e:
            if is_first_run:
                raise UsageError(str(e))
            Console.warn(str(e), important=True)
        is_first_run = False


def versions():
    """List supported Minecraft versions."""

    from rich.table import Table

    from ..core.versions import VERSIONS

    table = Table(title="Supported versions")
    table.add_column("Version")
    table.add_column("Update")
    table.add_column("Data version", justify="right")
    table.add_column("Pack format", justify="right")
    table.add_column("Block ids")
    table.add_column("Datapack")
    for profile in VERSIONS:
        table.add_row(
            profile.label,
            profile.description,
            str(profile.data_version),
            str(profile.pack_format),
            "numeric" if profile.uses_numeric_ids else "namespaced",
            "yes" if profile.supports_datapack else "no",
        )
    Console.render(table)


def mappings(
    out_path: Annotated[
        Path | None,
        Option(
            "--out",
            "-o",
            help="File to write the mappings to",
            show_default="print to stdout",
            metavar="file",
            dir_okay=False,
        ),
    ] = None,
):
    """Generate fallbacks for blocks missing from older versions."""

    from msgspec import json

    from ..tools.mappings import generate_mappings

    data = json.format(json.encode(generate_mappings()), indent=2)
    if not out_path:
        typer.echo(data.decode())
        return

    out_path.write_bytes(data)
    Console.success("Mappings written to {path}", path=out_path)
