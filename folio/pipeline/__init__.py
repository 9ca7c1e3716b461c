"""Resumable per-entry task execution."""

from .access import AccessibilityProbe, resolve_fetchable_url
from .content_address import content_address, result_file_name
from .executor import (
    ManifestRunResult,
    ProcessingBudget,
    ProcessReport,
    ResumablePipelineExecutor,
    normalise_task_list,
    process_manifests,
)
from .result_store import JsonFileResultStore
from .runner import TaskExecutor, TaskPipelineRunner
from .tasks import TaskOutcome, TaskRegistry, TaskStatus, default_registry


__all__ = [
    "AccessibilityProbe",
    "JsonFileResultStore",
    "ManifestRunResult",
    "ProcessReport",
    "ProcessingBudget",
    "ResumablePipelineExecutor",
    "TaskExecutor",
    "TaskOutcome",
    "TaskPipelineRunner",
    "TaskRegistry",
    "TaskStatus",
    "content_address",
    "default_registry",
    "normalise_task_list",
    "process_manifests",
    "resolve_fetchable_url",
    "result_file_name",
]
