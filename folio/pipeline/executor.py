"""Resumable, manifest-driven task execution.

For every manifest entry the executor works out which pipeline tasks still
need to run for the entry's content address and drives them one at a time
through a `TaskExecutor`. Nothing besides the manifest and the per-address
task records is persisted, so re-running the same manifests only performs
work that is not already recorded.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from folio.errors import ManifestNotFoundError, ManifestParseError, NoTasksRegisteredError
from folio.manifest import EntryStatus, ManifestEntry, load_manifest, resolve_manifest_path, save_manifest
from folio.utils.log_utils import logger

from .access import AccessibilityProbe, resolve_fetchable_url
from .content_address import content_address, result_file_name
from .runner import TaskExecutor
from .tasks import TaskStatus


class ProcessingBudget:
    """Upper bound on the number of entries processed across a whole run."""

    def __init__(self, limit: int | None = None) -> None:
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        self.limit = limit
        self.used = 0

    @property
    def exhausted(self) -> bool:
        return self.limit is not None and self.used >= self.limit

    def consume(self) -> None:
        self.used += 1


@dataclass(slots=True)
class ProcessReport:
    entries: list[ManifestEntry]
    processed: int = 0
    skipped: list[str] = field(default_factory=list)
    tasks_run: int = 0


@dataclass(slots=True)
class ManifestRunResult:
    path: Path
    total: int = 0
    processed: int = 0
    error: str | None = None


class ResumablePipelineExecutor:
    """Drives manifest entries through their task pipelines.

    Args:
        executor: Task execution backend.
        task_names: Every task name currently available; used as the pipeline
            of entries that do not declare one.
        asset_root: Directory that relative entry URLs are resolved against.
        probe: Accessibility check applied before any task runs.

    Raises:
        NoTasksRegisteredError: `task_names` is empty.
    """

    def __init__(
        self,
        executor: TaskExecutor,
        task_names: Sequence[str],
        *,
        asset_root: Path,
        probe: AccessibilityProbe | None = None,
    ) -> None:
        if not task_names:
            raise NoTasksRegisteredError("No tasks registered; nothing could be processed.")
        self.executor = executor
        self.task_names = list(task_names)
        self.asset_root = asset_root
        self.probe = probe or AccessibilityProbe()

    def effective_pipeline(
        self, entry: ManifestEntry, pipeline_override: Sequence[str] | None = None
    ) -> list[str]:
        if pipeline_override:
            return list(pipeline_override)
        if entry.pipeline:
            return list(entry.pipeline)
        return list(self.task_names)

    def process(
        self,
        entries: list[ManifestEntry],
        *,
        pipeline_override: Sequence[str] | None = None,
        force: bool = False,
        budget: ProcessingBudget | None = None,
    ) -> ProcessReport:
        """Process `entries` in order, updating `status` and `result_file` in place.

        Entries skipped for a missing url, inaccessible media or an unexpected
        error while running their tasks are left `pending`, even if an earlier
        run marked them complete. Their `result_file` is kept.
        """
        budget = budget or ProcessingBudget()
        report = ProcessReport(entries=entries)
        total = len(entries)

        for index, entry in enumerate(entries):
            if budget.exhausted:
                logger.info(f"Entry limit of {budget.limit} reached; stopping.")
                break

            if not entry.url:
                logger.warning(f"Entry {index} has no 'url'; skipping.")
                entry.status = EntryStatus.PENDING
                report.skipped.append(f"entry {index}: missing url")
                continue

            logger.info(f"[bold][{index + 1}/{total}] {entry.display_name}[/bold]")
            fetchable = resolve_fetchable_url(entry.url, self.asset_root)
            reason = self.probe.check(fetchable)
            if reason is not None:
                logger.warning(f"Skipping {entry.url}: media not accessible ({reason}).")
                entry.status = EntryStatus.PENDING
                report.skipped.append(f"{entry.url}: {reason}")
                continue

            budget.consume()
            try:
                report.tasks_run += self._run_entry(
                    entry, entry.url, fetchable, pipeline_override, force
                )
            except Exception as exc:
                logger.warning(f"Skipping {entry.url}: task execution failed ({exc!r}).")
                entry.status = EntryStatus.PENDING
                report.skipped.append(f"{entry.url}: {exc}")
                continue
            report.processed += 1

        return report

    def _run_entry(
        self,
        entry: ManifestEntry,
        url: str,
        fetchable: str,
        pipeline_override: Sequence[str] | None,
        force: bool,
    ) -> int:
        pipeline = self.effective_pipeline(entry, pipeline_override)
        address = content_address(url)
        completed = self.executor.completed_tasks(address)

        if force:
            queue = list(pipeline)
        else:
            queue = [name for name in pipeline if name not in completed]
            if not queue:
                logger.info("  All tasks already complete; skipping (use --force to rerun).")
                entry.mark_complete(result_file_name(url))
                return 0
            if completed:
                logger.info(f"  Resuming: {len(queue)} task(s) remaining: {', '.join(queue)}")

        inputs = self._task_inputs(entry, fetchable)
        runs = 0
        while queue:
            outcome = self.executor.run_next(address, queue, inputs)
            if outcome is None:
                break
            runs += 1
            if outcome.status is TaskStatus.FAILED:
                logger.warning(f"  {outcome.task:<28} FAILED: {outcome.error or ''}")
            else:
                logger.info(f"  {outcome.task:<28} {outcome.status.value}")

        entry.mark_complete(result_file_name(url))
        return runs

    @staticmethod
    def _task_inputs(entry: ManifestEntry, fetchable: str) -> dict[str, Any]:
        inputs: dict[str, Any] = {
            "url": entry.url,
            "image_url": fetchable,
            "title": entry.title,
            "metadata": entry.metadata or {},
        }
        inputs.update(entry.inputs or {})
        return inputs


def process_manifests(
    manifest_paths: Iterable[str | Path],
    pipeline: ResumablePipelineExecutor,
    *,
    data_dir: Path,
    pipeline_override: Sequence[str] | None = None,
    limit: int | None = None,
    force: bool = False,
) -> list[ManifestRunResult]:
    """Process manifests sequentially and rewrite each one afterwards.

    A missing manifest is a warning and an unparseable one an error; in both
    cases the run moves on to the next manifest.
    """
    budget = ProcessingBudget(limit)
    results: list[ManifestRunResult] = []

    for raw_path in manifest_paths:
        path = resolve_manifest_path(raw_path, data_dir)
        result = ManifestRunResult(path=path)
        results.append(result)

        if budget.exhausted:
            logger.info(f"Entry limit reached; not visiting {path}.")
            continue

        try:
            entries = load_manifest(path)
        except ManifestNotFoundError:
            logger.warning(f"Manifest not found: {path}; skipping.")
            result.error = "not found"
            continue
        except ManifestParseError as exc:
            logger.error(f"Cannot read manifest: {exc}")
            result.error = str(exc)
            continue

        result.total = len(entries)
        logger.info(f"Manifest : {path} ({len(entries)} entries)")
        try:
            report = pipeline.process(
                entries, pipeline_override=pipeline_override, force=force, budget=budget
            )
            result.processed = report.processed
        finally:
            save_manifest(path, entries)
        logger.info(f"Processed {report.processed}/{len(entries)} entries. Manifest updated.")

    return results


def normalise_task_list(raw: str | None) -> list[str] | None:
    """Split a comma-separated task override, dropping blanks."""
    if raw is None:
        return None
    names = [name.strip() for name in raw.split(",")]
    return [name for name in names if name] or None


__all__ = [
    "ManifestRunResult",
    "ProcessReport",
    "ProcessingBudget",
    "ResumablePipelineExecutor",
    "normalise_task_list",
    "process_manifests",
]
