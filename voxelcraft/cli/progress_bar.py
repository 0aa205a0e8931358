from __future__ import annotations

from enum import Enum
from threading import Thread
from typing import Iterable, TypeVar

from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from .console import Console

T = TypeVar("T")


class UserCancelled(Exception): ...


class Stage(Enum):
    meshing = "Meshing"
    encoding = "Encoding"
    writing = "Writing"


class ProgressBar:
    """Progress of one export, one bar per stage.

    With a prompt, meshing and encoding run while the user is asked;
    bars show up once they have answered, and writing waits for a yes.
    """

    def __init__(self, formats_count: int, *, prompt: str | None = None):
        self._totals = {
            Stage.meshing: 1,
            Stage.encoding: formats_count,
            Stage.writing: formats_count,
        }
        self._done = dict.fromkeys(Stage, 0)
        self._bars = Progress(
            TextColumn("{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            transient=True,
        )
        self._tasks = {}
        self._prompt = prompt
        self._answer = None if prompt else True
        self._thread = Thread(target=self._ask, daemon=True) if prompt else None

    def __enter__(self):
        if self._thread:
            self._thread.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._thread:
            self._thread.join()
        if self._tasks:
            self._bars.stop()

    def track(self, stage: Stage, jobs: Iterable[T]) -> list[T]:
        if stage is Stage.writing:
            self.wait_for_answer()

        results: list[T] = []
        for result in jobs:
            results.append(result)
            self._done[stage] += 1
            self._refresh(stage)
        return results

    def wait_for_answer(self):
        if self._thread:
            self._thread.join()
        if not self._answer:
            raise UserCancelled

    def _ask(self):
        self._answer = Console.confirm(self._prompt or "", default=True)

    def _refresh(self, stage: Stage):
        if not self._answer:
            return  # prompt still open

        if not self._tasks:
            self._bars.start()
            for each in Stage:
                self._tasks[each] = self._bars.add_task(
                    each.value, total=self._totals[each], completed=self._done[each]
                )
        else:
            self._bars.update(self._tasks[stage], completed=self._done[stage])
