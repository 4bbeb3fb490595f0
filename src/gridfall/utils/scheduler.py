from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List


@dataclass(slots=True)
class DeferredTask:
    due: float
    order: int
    callback: Callable[[], None] = field(repr=False)
    label: str = ""


@dataclass(slots=True)
class TaskQueue:
    """Deferred work drained by the host loop.

    The queue keeps its own timeline, advanced only by ``advance(dt)``, so a
    task scheduled with a delay runs on the first tick that reaches its due
    time. Tasks due on the same tick run in scheduling order. A task may
    schedule further tasks; those wait for a later tick unless already due.
    """

    now: float = 0.0
    _tasks: List[DeferredTask] = field(init=False, default_factory=list, repr=False)
    _sequence: int = field(init=False, default=0, repr=False)
    _generation: int = field(init=False, default=0, repr=False)

    def schedule(self, delay: float, callback: Callable[[], None], *, label: str = "") -> DeferredTask:
        task = DeferredTask(due=self.now + max(0.0, float(delay)), order=self._sequence, callback=callback, label=label)
        self._sequence += 1
        self._tasks.append(task)
        return task

    def advance(self, dt: float) -> int:
        if dt > 0:
            self.now += float(dt)
        due = sorted((task for task in self._tasks if task.due <= self.now), key=lambda task: (task.due, task.order))
        if not due:
            return 0
        for task in due:
            self._tasks.remove(task)
        generation = self._generation
        ran = 0
        for task in due:
            # clear() from inside a callback drops the rest of this batch too.
            if self._generation != generation:
                break
            task.callback()
            ran += 1
        return ran

    def pending(self, label: str | None = None) -> bool:
        if label is None:
            return bool(self._tasks)
        return any(task.label == label for task in self._tasks)

    def clear(self) -> None:
        self._tasks.clear()
        self._generation += 1

    def __len__(self) -> int:
        return len(self._tasks)
