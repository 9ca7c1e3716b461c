"""Execution of queued tasks against a content address."""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableSequence
from pathlib import Path
from typing import Any, Protocol

from folio.errors import TaskSkipped
from folio.utils.log_utils import logger

from .result_store import JsonFileResultStore
from .tasks import TaskOutcome, TaskRegistry, TaskStatus


BeforeTaskCallback = Callable[[str], None]
AfterTaskCallback = Callable[[TaskOutcome], None]


class TaskExecutor(Protocol):
    """The two operations the pipeline executor needs from task execution."""

    def completed_tasks(self, address: str) -> set[str]: ...

    def run_next(
        self,
        address: str,
        queue: MutableSequence[str],
        inputs: Mapping[str, Any],
    ) -> TaskOutcome | None: ...


class TaskPipelineRunner:
    """Runs registered tasks and records their outcomes in per-address JSON files."""

    def __init__(self, registry: TaskRegistry, data_dir: Path) -> None:
        self.registry = registry
        self.data_dir = data_dir
        self._before: list[BeforeTaskCallback] = []
        self._after: list[AfterTaskCallback] = []

    def on_before_task(self, callback: BeforeTaskCallback) -> None:
        self._before.append(callback)

    def on_after_task(self, callback: AfterTaskCallback) -> None:
        self._after.append(callback)

    def store(self, address: str) -> JsonFileResultStore:
        return JsonFileResultStore(address, self.data_dir)

    def completed_tasks(self, address: str) -> set[str]:
        return self.store(address).completed()

    def run_next(
        self,
        address: str,
        queue: MutableSequence[str],
        inputs: Mapping[str, Any],
    ) -> TaskOutcome | None:
        """Pop the head of `queue`, run it and record the outcome.

        Returns None once the queue is empty.
        """
        if not queue:
            return None
        name = queue.pop(0)
        store = self.store(address)
        if inputs.get("url") is not None:
            store.url = str(inputs["url"])

        for callback in self._before:
            callback(name)

        outcome = self._execute(name, inputs, store.prior_payloads())
        store.record(outcome)

        for after in self._after:
            after(outcome)
        return outcome

    def _execute(
        self, name: str, inputs: Mapping[str, Any], prior: Mapping[str, Any]
    ) -> TaskOutcome:
        task = self.registry.get(name)
        if task is None:
            return TaskOutcome(name, TaskStatus.FAILED, {"error": f"Unknown task '{name}'"})
        try:
            payload = task(inputs, prior)
        except TaskSkipped as exc:
            return TaskOutcome(name, TaskStatus.SKIPPED, {"reason": str(exc)})
        except Exception as exc:
            logger.debug(f"Task {name} raised {exc!r}")
            return TaskOutcome(name, TaskStatus.FAILED, {"error": str(exc) or type(exc).__name__})
        return TaskOutcome(name, TaskStatus.DONE, dict(payload or {}))
