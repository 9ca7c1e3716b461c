from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import json
from pathlib import Path

from folio.errors import ManifestParseError, ResolutionError, UnrecognizedUrlError
from folio.manifest import (
    ManifestEntry,
    entry_exists,
    load_manifest,
    resolve_manifest_path,
    save_manifest,
)
from folio.sources import DocumentResolver, DocumentType, ResolvedDocument
from folio.sources.resolver import SUPPORTED_HINT
from folio.utils.log_utils import logger


PIPELINES: dict[str, list[str]] = {
    "handwritten_document": [
        "ocr_mistral",
        "annotate_handwriting",
        "transcribe_handwriting",
        "people_and_places",
        "extract_metadata",
        "generate_title",
    ],
    "printed_document": [
        "ocr_mistral",
        "classify",
        "extract_metadata",
        "summarize",
        "keywords",
    ],
    "photograph_or_card": [
        "ocr_mistral",
        "classify",
        "basic_description",
        "keywords",
    ],
    "full_analysis": [
        "ocr_mistral",
        "classify",
        "summarize",
        "keywords",
        "transcribe_handwriting",
        "annotate_handwriting",
        "people_and_places",
        "extract_metadata",
        "generate_title",
    ],
}
FALLBACK_PIPELINE = "printed_document"
IMAGES_MANIFEST = "images.json"
PDFS_MANIFEST = "pdfs.json"

PipelineChooser = Callable[[Sequence[str]], str]


@dataclass(slots=True)
class AddOptions:
    url: str
    data_dir: Path
    pipeline: str | None = None
    title: str | None = None
    manifest: Path | None = None
    dry_run: bool = False


def default_manifest_name(document: ResolvedDocument) -> str:
    return PDFS_MANIFEST if document.type is DocumentType.PDF else IMAGES_MANIFEST


def select_pipeline(requested: str | None, chooser: PipelineChooser | None) -> tuple[str, list[str]]:
    if requested and requested in PIPELINES:
        name = requested
    else:
        if requested:
            logger.warning(f"Unknown pipeline preset '{requested}'.")
        name = chooser(list(PIPELINES)) if chooser else FALLBACK_PIPELINE
    if name not in PIPELINES:
        name = FALLBACK_PIPELINE
    return name, list(PIPELINES[name])


def build_entry(document: ResolvedDocument, pipeline: Sequence[str]) -> ManifestEntry:
    return ManifestEntry(
        url=document.url,
        provenance=document.provenance,
        title=document.title,
        collection=document.collection,
        pipeline=list(pipeline),
        metadata=dict(document.metadata) or None,
    )


def run(
    options: AddOptions,
    *,
    resolver: DocumentResolver | None = None,
    chooser: PipelineChooser | None = None,
) -> int:
    resolver = resolver or DocumentResolver()
    try:
        document = resolver.resolve(options.url)
    except ResolutionError as exc:
        logger.error(str(exc))
        if isinstance(exc, UnrecognizedUrlError):
            logger.info(SUPPORTED_HINT)
        return 1

    logger.info(f"Title      : {document.title or '(none)'}")
    logger.info(f"Media URL  : {document.url}")
    logger.info(f"Type       : {document.type.value}")
    logger.info(f"Collection : {document.collection or '(none)'}")
    logger.info(f"Provenance : {document.provenance or '(none)'}")

    if not document.type.processable:
        if document.type is DocumentType.VIDEO:
            logger.warning("Video items are not yet supported by the pipeline.")
        else:
            logger.warning(
                "Could not determine a processable media file (image or PDF) from this URL."
            )
        return 1

    if options.title:
        document.title = options.title

    _, pipeline = select_pipeline(options.pipeline, chooser)
    logger.info(f"Pipeline: {' → '.join(pipeline)}")

    manifest_path = resolve_manifest_path(
        options.manifest or default_manifest_name(document), options.data_dir
    )
    try:
        entries = load_manifest(manifest_path, missing_ok=True)
    except ManifestParseError as exc:
        logger.error(f"Cannot read manifest: {exc}")
        return 1

    if entry_exists(entries, document.url):
        logger.warning(f"This URL is already in {manifest_path.name}; skipping.")
        return 0

    entry = build_entry(document, pipeline)
    print(json.dumps(entry.to_dict(), indent=4, ensure_ascii=False))

    if options.dry_run:
        logger.info("Dry run: nothing written.")
        return 0

    entries.append(entry)
    save_manifest(manifest_path, entries)
    logger.info(
        f"Added to {manifest_path.name}. Run 'folio process -m {manifest_path.name}' to process it."
    )
    return 0
