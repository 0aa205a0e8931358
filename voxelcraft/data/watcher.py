from __future__ import annotations

import os
import time
from pathlib import Path
from sys import stdin
from threading import Thread
from typing import Generator

import watchfiles
from click import UsageError

from ..cli.console import Console
from ..core.voxels import Voxel
from .loader import MAX_PIPE_SIZE, decode, parse


def watch(path: Path | None) -> Generator[list[Voxel]]:
    """Voxels on every change of the input.

    A file is re-read whenever it is saved; stdin is read as
    newline-delimited JSON voxel lists.
    """

    data_stream = _file_stream(path) if path else _stdin_stream()
    is_first_run = True

    def fetch_next():
        if is_first_run:
            if path:
                return next(data_stream)
            return Console.status("Reading input", data_stream.__next__)

        Console.newline()
        return Console.status("Waiting for changes", data_stream.__next__)

    while True:
        voxels = fetch_next()
        is_first_run = False

        if not voxels:
            Console.warn("Input has no blocks; waiting for changes.", important=True)
            continue

        yield voxels


def _file_stream(path: Path) -> Generator[list[Voxel]]:
    def trigger_initial_run():
        # the watch loop only wakes on changes, so touch the file until it does;
        # yielding once before the loop would miss changes during the first run
        while not triggered:
            time.sleep(0.2)
            os.utime(path)

    triggered = False
    trigger_thread = Thread(target=trigger_initial_run, daemon=True)
    trigger_thread.start()

    is_first_run = True
    for _ in watchfiles.watch(path, debounce=0, rust_timeout=0):
        triggered = True
        try:
            yield parse(path.read_bytes(), filename=path.name)
            is_first_run = False
        except UsageError as e:
            # the file may be half-written, wait for the next save
            if is_first_run:
                raise
            Console.warn(e.message, important=True)


def _stdin_stream() -> Generator[list[Voxel]]:
    if stdin.isatty():
        raise UsageError(
            "Missing input: Either provide file path with --in, or pipe content to stdin.",
        )

    DELIMITER = b"\n"
    CHUNK_SIZE = 1024 * 1024  # 1 MB

    buffer = bytearray()
    while True:
        chunk = b""
        while DELIMITER not in chunk and len(buffer) < MAX_PIPE_SIZE:
            chunk = os.read(stdin.fileno(), CHUNK_SIZE)
            if not chunk:
                raise UsageError("Input pipe closed.")
            buffer.extend(chunk)

        # several payloads in one read, only the latest matters
        payload: bytearray | None = None
        while True:
            try:
                delimiter = buffer.index(DELIMITER)
            except ValueError:
                break
            line = buffer[:delimiter]
            del buffer[: delimiter + 1]
            if line.strip():
                payload = line

        if payload is None:
            raise UsageError("Input data does not match expected format.")
        yield decode(payload)
