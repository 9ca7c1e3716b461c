from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from folio.config.settings import FolioSettings
from folio.errors import NoTasksRegisteredError
from folio.pdf import MogrifyTrimmer, PageImageCache, build_rasterizer
from folio.pipeline import (
    AccessibilityProbe,
    ResumablePipelineExecutor,
    TaskPipelineRunner,
    TaskRegistry,
    default_registry,
    process_manifests,
)
from folio.utils.log_utils import logger


DEFAULT_MANIFESTS: tuple[str, ...] = ("images.json", "pdfs.json")


@dataclass(slots=True)
class ProcessOptions:
    manifests: Sequence[str]
    tasks: list[str] | None = None
    limit: int | None = None
    force: bool = False
    split: bool = True


def build_page_cache(settings: FolioSettings) -> PageImageCache:
    return PageImageCache(
        pages_dir=settings.paths.pages_dir,
        asset_root=settings.paths.public_dir,
        data_dir=settings.paths.data_dir,
        rasterizer=build_rasterizer(
            settings.raster.engine, dpi=settings.raster.dpi, timeout=settings.raster.timeout
        ),
        trimmer=MogrifyTrimmer(binary=settings.raster.trim_binary),
        download_timeout=settings.http.download_timeout,
    )


def run(
    options: ProcessOptions,
    settings: FolioSettings,
    *,
    registry: TaskRegistry | None = None,
) -> int:
    registry = registry if registry is not None else default_registry()
    manifests = list(options.manifests) or list(DEFAULT_MANIFESTS)

    runner = TaskPipelineRunner(registry, settings.paths.data_dir)
    runner.on_before_task(lambda name: logger.debug(f"  running {name}"))
    try:
        executor = ResumablePipelineExecutor(
            runner,
            registry.names(),
            asset_root=settings.paths.public_dir,
            probe=AccessibilityProbe(timeout=settings.http.probe_timeout),
        )
    except NoTasksRegisteredError as exc:
        logger.error(str(exc))
        return 1

    logger.info(f"Data dir : {settings.paths.data_dir}")
    logger.info(f"Registered tasks: {', '.join(registry.names())}")
    if options.tasks:
        unknown = [name for name in options.tasks if name not in registry]
        if unknown:
            logger.warning(f"Not registered (will be recorded as failed): {', '.join(unknown)}")

    results = process_manifests(
        manifests,
        executor,
        data_dir=settings.paths.data_dir,
        pipeline_override=options.tasks,
        limit=options.limit,
        force=options.force,
    )
    processed = sum(result.processed for result in results)
    total = sum(result.total for result in results)
    logger.info(f"Processed {processed}/{total} entries across {len(results)} manifest(s).")

    if options.split:
        build_page_cache(settings).split_all(manifests)
    return 0


def run_split(manifests: Sequence[str], settings: FolioSettings) -> int:
    build_page_cache(settings).split_all(list(manifests) or list(DEFAULT_MANIFESTS))
    return 0
