"""JSON-file Task Execution Records, one file per content address."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import os
from pathlib import Path
import tempfile
from typing import Any

from folio.utils.log_utils import logger

from .content_address import RESULT_EXTENSION
from .tasks import COMPLETED_STATUSES, TaskOutcome, TaskStatus


class JsonFileResultStore:
    """Task outcomes for one content address, stored as `{data_dir}/{address}.json`.

    Layout::

        {"url": "...", "tasks": {"<task>": {"status": "done", "payload": {...},
                                            "updated_at": "..."}}}
    """

    def __init__(self, address: str, data_dir: Path, *, url: str | None = None) -> None:
        self.address = address
        self.data_dir = data_dir
        self.url = url
        self._record: dict[str, Any] | None = None

    @property
    def file_path(self) -> Path:
        return self.data_dir / f"{self.address}{RESULT_EXTENSION}"

    def _read(self) -> dict[str, Any]:
        if not self.file_path.is_file():
            return {}
        try:
            with open(self.file_path, encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(f"Ignoring unreadable task record for {self.address}: {exc}")
            return {}
        if not isinstance(loaded, dict):
            logger.warning(f"Ignoring task record for {self.address}: root is not an object")
            return {}
        return loaded

    def _load(self) -> dict[str, Any]:
        if self._record is None:
            record = self._read()
            tasks = record.get("tasks")
            if tasks is not None and not isinstance(tasks, dict):
                logger.warning(f"Ignoring malformed 'tasks' in task record for {self.address}")
                tasks = None
            # Results that are not objects carry no status and are dropped.
            record["tasks"] = {
                name: result for name, result in (tasks or {}).items() if isinstance(result, dict)
            }
            if self.url is not None:
                record.setdefault("url", self.url)
            self._record = record
        return self._record

    def tasks(self) -> dict[str, dict[str, Any]]:
        return self._load()["tasks"]

    def completed(self) -> set[str]:
        completed: set[str] = set()
        for name, result in self.tasks().items():
            try:
                status = TaskStatus(result.get("status"))
            except ValueError:
                continue
            if status in COMPLETED_STATUSES:
                completed.add(name)
        return completed

    def prior_payloads(self) -> dict[str, Any]:
        return {
            name: result.get("payload")
            for name, result in self.tasks().items()
            if result.get("status") == TaskStatus.DONE.value
        }

    def record(self, outcome: TaskOutcome) -> None:
        result: dict[str, Any] = {
            "status": outcome.status.value,
            "payload": outcome.payload,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        if outcome.error is not None:
            result["error"] = outcome.error
        self.tasks()[outcome.task] = result
        self._write()

    def _write(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.address}.", suffix=".tmp", dir=self.data_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._load(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.file_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
