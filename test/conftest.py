import pytest


@pytest.fixture(autouse=True)
def mock_console(monkeypatch):
    from voxelcraft.cli.console import Console

    for attr in dir(Console):
        if not attr.startswith("_") and callable(getattr(Console, attr)):
            monkeypatch.setattr(Console, attr, lambda *a, **k: None)
    monkeypatch.setattr(Console, "status", lambda text, fn: fn())


@pytest.fixture(autouse=True)
def mock_progress_bar(monkeypatch):
    from voxelcraft.cli.progress_bar import ProgressBar

    monkeypatch.setattr(ProgressBar, "__enter__", lambda self: self)
    monkeypatch.setattr(ProgressBar, "__exit__", lambda *args: None)
    monkeypatch.setattr(ProgressBar, "track", lambda self, stage, jobs: list(jobs))


@pytest.fixture(autouse=True)
def cache_dir(monkeypatch, tmp_path):
    from voxelcraft.export import cache

    path = tmp_path / "cache"
    monkeypatch.setattr(cache, "_CACHE_DIR", path)
    return path


@pytest.fixture
def builder():
    from voxelcraft.core.builder import VoxelBuilder

    return VoxelBuilder()
