from __future__ import annotations

import hashlib
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, final

from humanize import naturaltime
from msgspec import DecodeError, Struct, field, msgpack
from platformdirs import user_cache_dir

from .. import APP_NAME
from ..cli.console import Console

if TYPE_CHECKING:
    from ..core.voxels import Voxel
    from .exporter import ExportConfig

# "x y z" -> block type?properties
BlockMap = dict[str, str]


class CacheData(Struct):
    last_modified: float = field(default_factory=lambda: datetime.now().timestamp())
    blocks: BlockMap = {}
    outputs: list[str] = []


def block_map(voxels: list[Voxel]) -> BlockMap:
    blocks: BlockMap = {}
    for voxel in voxels:
        x, y, z = voxel.position
        block = voxel.type
        if voxel.properties:
            block += f"?{voxel.properties}"
        blocks[f"{x} {y} {z}"] = block
    return blocks


@final
class ExportCache:
    """Last exported structure for an output location, kept between runs."""

    @staticmethod
    def get_key(**kwargs) -> str:
        serialized = msgpack.encode(
            {k: str(v) for k, v in kwargs.items()}, order="deterministic"
        )
        return hashlib.sha256(serialized).hexdigest()

    @staticmethod
    def delete(config: ExportConfig) -> None:
        _get_cache_file(config).unlink(missing_ok=True)

    def __init__(self, config: ExportConfig):
        self._config = config
        self._data = _load_cache(config)
        self._cached_length = len(self._data.blocks) if self._data else 0

        if self._data:
            Console.info(
                "Using previous export from {whence}",
                whence=naturaltime(
                    datetime.now() - datetime.fromtimestamp(self._data.last_modified)
                ),
            )
        else:
            self._data = CacheData()
            Console.warn("No previous export found. This run will export from scratch.")

    def has_data(self):
        return bool(self._cached_length)

    def update(self, *, blocks: BlockMap) -> BlockMap:
        """Blocks that differ from the last export, removed ones included."""

        assert self._data is not None
        cached_blocks = self._data.blocks
        updated_blocks = _calculate_difference(blocks, cached_blocks)

        if not updated_blocks:
            Console.success("Structure unchanged; nothing to export.")
        elif self._cached_length:
            percentage = (len(updated_blocks) / self._cached_length) * 100
            Console.info(
                "Structure differs by {difference} from last export.",
                difference=f"{percentage:.1f}%" if percentage >= 0.1 else "< 0.1%",
            )

        self._data.blocks = blocks
        return updated_blocks

    def commit(self, outputs: list[Path]):
        assert self._data is not None
        self._data.last_modified = datetime.now().timestamp()
        self._data.outputs = [str(path) for path in outputs]
        self._cached_length = len(self._data.blocks)
        _save_cache(self._config, self._data)


def _calculate_difference(blocks: BlockMap, cached_blocks: BlockMap) -> BlockMap:
    updated = {k: v for k, v in blocks.items() if cached_blocks.get(k) != v}
    updated.update({k: "air" for k in cached_blocks.keys() - blocks.keys()})
    return updated


_CACHE_DIR = Path(user_cache_dir(APP_NAME))


def _get_cache_file(config: ExportConfig) -> Path:
    return _CACHE_DIR / ExportCache.get_key(
        out=config.out_dir,
        name=config.name,
        version=config.version,
        formats=sorted(f.value for f in config.formats),
    )


def _load_cache(config: ExportConfig) -> CacheData | None:
    try:
        with _get_cache_file(config).open("rb") as f:
            data = msgpack.decode(f.read(), type=CacheData)
    except (FileNotFoundError, DecodeError):
        return None

    # outputs deleted or moved since, export again
    if not all(Path(output).exists() for output in data.outputs):
        return None
    return data


def _save_cache(config: ExportConfig, data: CacheData) -> None:
    cache_file = _get_cache_file(config)
    cache_file.parent.mkdir(parents=True, exist_ok=True)
    with cache_file.open("wb") as f:
        f.write(msgpack.encode(data))
