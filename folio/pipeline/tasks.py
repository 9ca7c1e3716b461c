"""Task registry and outcome types.

A task is a callable `task(inputs, prior) -> payload` where `inputs` is the
per-entry input mapping and `prior` maps already-recorded task names to their
payloads. Tasks raise `TaskSkipped` when they do not apply to a document and
any other exception to fail.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from importlib.metadata import entry_points
from typing import Any

from folio.utils.log_utils import logger


ENTRY_POINT_GROUP = "folio.tasks"

Task = Callable[[Mapping[str, Any], Mapping[str, Any]], Mapping[str, Any] | None]


class TaskStatus(str, Enum):
    DONE = "done"
    SKIPPED = "skipped"
    FAILED = "failed"


COMPLETED_STATUSES = frozenset({TaskStatus.DONE, TaskStatus.SKIPPED})


@dataclass(frozen=True)
class TaskOutcome:
    task: str
    status: TaskStatus
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def error(self) -> str | None:
        error = self.payload.get("error")
        return str(error) if error is not None else None


class TaskRegistry:
    """Ordered mapping of task name to task callable."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}

    def register(self, name: str, task: Task | None = None) -> Any:
        """Register `task` under `name`; usable as a decorator when `task` is omitted."""
        if task is not None:
            self._tasks[name] = task
            return task

        def decorator(func: Task) -> Task:
            self._tasks[name] = func
            return func

        return decorator

    def get(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def names(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def load_entry_points(self, group: str = ENTRY_POINT_GROUP) -> None:
        """Register every callable advertised by installed distributions under `group`."""
        for ep in entry_points(group=group):
            try:
                task = ep.load()
            except Exception as exc:
                logger.warning(f"Could not load task '{ep.name}' from {ep.value}: {exc}")
                continue
            self.register(ep.name, task)


def default_registry() -> TaskRegistry:
    """Built-in tasks plus any installed through the `folio.tasks` entry-point group."""
    from folio.tasks.builtin import register_builtin_tasks

    registry = TaskRegistry()
    register_builtin_tasks(registry)
    registry.load_entry_points()
    return registry
