from __future__ import annotations

from collections.abc import Callable, Sequence
from functools import wraps
from pathlib import Path
from typing import ParamSpec, TypeVar

import typer  # type: ignore[import]

from folio.config.settings import get_settings
from folio.pipeline import default_registry, normalise_task_list
from folio.utils.log_utils import logger, set_console_level

from . import add, process


app = typer.Typer(
    help="folio: manifest-driven document processing",
)


@app.callback()
def _root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output on the console."),
) -> None:
    if verbose:
        set_console_level("DEBUG")


_P = ParamSpec("_P")
_T = TypeVar("_T")


def _interruptible(handler: Callable[_P, _T]) -> Callable[_P, _T]:
    @wraps(handler)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
        try:
            return handler(*args, **kwargs)
        except KeyboardInterrupt as err:
            logger.info("Interrupted by user")
            raise typer.Exit(code=130) from err

    return wrapper


def _prompt_for_pipeline(names: Sequence[str]) -> str:
    for index, name in enumerate(names):
        logger.info(f"  [{index}] {name}  ({' → '.join(add.PIPELINES[name])})")
    answer = typer.prompt("Select a pipeline", default=names[0])
    if answer.isdigit() and int(answer) < len(names):
        return names[int(answer)]
    return answer.strip()


def _exit_with(code: int) -> None:
    if code != 0:
        raise typer.Exit(code=code)


@app.command("add")
@_interruptible
def add_command(
    url: str = typer.Argument(
        ...,
        help="Document URL, Omeka-S item page, or National Archives catalog page.",
    ),
    pipeline: str | None = typer.Option(
        None,
        "--pipeline",
        "-p",
        help=f"Pipeline preset. Choices: {', '.join(add.PIPELINES)}.",
    ),
    title: str | None = typer.Option(
        None,
        "--title",
        help="Override the auto-detected title.",
    ),
    manifest: Path | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Target manifest (absolute, or relative to the data dir). Defaults by media type.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show the entry that would be added without writing it.",
    ),
) -> None:
    settings = get_settings()
    options = add.AddOptions(
        url=url,
        data_dir=settings.paths.data_dir,
        pipeline=pipeline,
        title=title,
        manifest=manifest,
        dry_run=dry_run,
    )
    _exit_with(add.run(options, chooser=_prompt_for_pipeline))


@app.command("process")
@_interruptible
def process_command(
    manifest: list[str] | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Manifest path (absolute, or relative to the data dir). Repeat for several.",
    ),
    tasks: str | None = typer.Option(
        None,
        "--tasks",
        "-t",
        help="Override the pipeline for all entries (comma-separated task names).",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        min=0,
        help="Stop after processing this many entries across all manifests.",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Re-run tasks even if results already exist.",
    ),
    no_split: bool = typer.Option(
        False,
        "--no-split",
        help="Do not split PDF entries into page images afterwards.",
    ),
) -> None:
    options = process.ProcessOptions(
        manifests=manifest or list(process.DEFAULT_MANIFESTS),
        tasks=normalise_task_list(tasks),
        limit=limit,
        force=force,
        split=not no_split,
    )
    _exit_with(process.run(options, get_settings()))


@app.command("split-pdfs")
@_interruptible
def split_pdfs_command(
    manifest: list[str] | None = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Manifest path to collect PDF entries from. Repeat for several.",
    ),
) -> None:
    _exit_with(process.run_split(manifest or list(process.DEFAULT_MANIFESTS), get_settings()))


@app.command("tasks")
def tasks_command() -> None:
    """List registered tasks and pipeline presets."""
    registry = default_registry()
    typer.echo("Registered tasks:")
    for name in registry.names():
        typer.echo(f"  {name}")
    typer.echo("Pipeline presets:")
    for name, task_names in add.PIPELINES.items():
        typer.echo(f"  {name}: {' → '.join(task_names)}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
