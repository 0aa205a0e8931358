from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .. import APP_NAME
from ..cli.console import Console
from ..cli.progress_bar import ProgressBar, Stage
from ..core.versions import LATEST
from .axiom import encode_axiom
from .cache import block_map
from .commands import generate_one_command, generate_optimized_commands
from .datapack import encode_datapack
from .formats import Format
from .grid import EmptyStructureError, Grid
from .litematic import encode_litematic
from .sponge import encode_schematic
from .structure import encode_nbt_structure

if TYPE_CHECKING:
    from ..core.voxels import Voxel
    from .cache import ExportCache


@dataclass(frozen=True)
class ExportConfig:
    out_dir: Path
    name: str = "structure"
    version: str = LATEST.id
    formats: tuple[Format, ...] = tuple(Format)
    author: str = APP_NAME

    def output_path(self, format: Format) -> Path:
        return self.out_dir / f"{self.name}{format.suffix}"


Encoder = Callable[[Grid, ExportConfig], bytes]

_ENCODERS: dict[Format, Encoder] = {
    Format.commands: lambda grid, config: "\n".join(
        generate_optimized_commands(grid, config.version)
    ).encode(),
    Format.one_command: lambda grid, config: generate_one_command(
        grid, config.version
    ).encode(),
    Format.nbt: lambda grid, config: encode_nbt_structure(grid, config.version),
    Format.schem: lambda grid, config: encode_schematic(grid, config.version),
    Format.litematic: lambda grid, config: encode_litematic(
        grid, config.version, name=config.name, author=config.author
    ),
    Format.bp: lambda grid, config: encode_axiom(
        grid, config.version, name=config.name, author=config.author
    ),
    Format.datapack: lambda grid, config: encode_datapack(
        grid, config.version, name=config.name
    ),
}


class Exporter:
    def __init__(self, config: ExportConfig):
        self.config = config
        self._is_first_run = True

    def export(
        self, voxels: list[Voxel], *, cache: ExportCache | None = None
    ) -> list[Path]:
        if not voxels:
            raise EmptyStructureError

        if cache and not cache.update(blocks=block_map(voxels)):
            return []

        is_first_run = self._is_first_run
        existing = [
            path
            for format in self.config.formats
            if (path := self.config.output_path(format)).exists()
        ]
        if is_first_run and existing:
            Console.warn(
                "{count} existing files in {out} will be overwritten.",
                count=len(existing),
                out=self.config.out_dir,
            )

        # files are staged next to their outputs until every one is written
        staged: list[tuple[Path, Path]] = []
        prompt = "Overwrite existing files?" if is_first_run and existing else None
        try:
            with ProgressBar(len(self.config.formats), prompt=prompt) as progress:
                (grid,) = progress.track(Stage.meshing, self._mesh(voxels))
                encoded = progress.track(Stage.encoding, self._encode(grid))
                progress.track(Stage.writing, self._stage(encoded, staged))
        except BaseException:
            for temp, _ in staged:
                temp.unlink(missing_ok=True)
            raise

        outputs = [temp.replace(path) for temp, path in staged]
        self._is_first_run = False
        if cache:
            cache.commit(outputs)
        Console.success(
            "Exported {count} to {out}",
            count=f"{len(outputs)} files",
            out=self.config.out_dir,
        )
        return outputs

    def _mesh(self, voxels: list[Voxel]):
        yield Grid(voxels)

    def _encode(self, grid: Grid):
        for format in self.config.formats:
            yield format, _ENCODERS[format](grid, self.config)

    def _stage(
        self, encoded: list[tuple[Format, bytes]], staged: list[tuple[Path, Path]]
    ):
        self.config.out_dir.mkdir(parents=True, exist_ok=True)
        for format, data in encoded:
            path = self.config.output_path(format)
            temp = path.with_name(f"{path.name}.part")
            temp.write_bytes(data)
            staged.append((temp, path))
            yield path
