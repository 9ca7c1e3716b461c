"""National Archives (NARA) catalog record resolution.

Catalog pages look like `https://catalog.archives.gov/id/{naId}`. The record
is looked up through the catalog's search proxy; its digital objects are
either individual page images or a consolidated PDF. Page images win.
"""

from __future__ import annotations

import re
from typing import Any

import requests

from folio.errors import ResolutionError
from folio.utils.log_utils import logger

from .catalog import CatalogClient
from .types import DocumentType, ResolvedDocument


RECORD_PAGE_PATTERN = re.compile(r"^https?://catalog\.archives\.gov/id/(\d+)")
SEARCH_URL = "https://catalog.archives.gov/proxy/records/search?naId_is={na_id}"
DEFAULT_COLLECTION = "National Archives"


def match_record_page(url: str) -> int | None:
    match = RECORD_PAGE_PATTERN.match(url)
    return int(match.group(1)) if match else None


def _series_collection(record: dict[str, Any]) -> str:
    for ancestor in record.get("ancestors") or []:
        if isinstance(ancestor, dict) and ancestor.get("levelOfDescription") == "series":
            return f"NARA — {ancestor.get('title') or 'Unknown Series'}"
    return DEFAULT_COLLECTION


def _split_digital_objects(record: dict[str, Any]) -> tuple[list[str], str | None]:
    images: list[str] = []
    pdf_url: str | None = None
    for obj in record.get("digitalObjects") or []:
        if not isinstance(obj, dict):
            continue
        object_type = obj.get("objectType") or ""
        object_url = obj.get("objectUrl") or ""
        if not object_url:
            continue
        if "Image" in object_type:
            images.append(object_url)
        elif "PDF" in object_type:
            pdf_url = object_url
    return images, pdf_url


def _year(value: Any) -> Any:
    return value.get("year") if isinstance(value, dict) else None


class NaraResolver:
    def __init__(self, client: CatalogClient) -> None:
        self.client = client

    def resolve(self, page_url: str, na_id: int) -> ResolvedDocument:
        api_url = SEARCH_URL.format(na_id=na_id)
        logger.info(f"Fetching NARA record: {api_url}")
        try:
            result = self.client.get_json(api_url)
        except requests.RequestException as exc:
            raise ResolutionError(page_url, f"Failed to fetch NARA record ({exc})") from exc

        hits: list[Any] = []
        if isinstance(result, dict):
            hits = ((result.get("body") or {}).get("hits") or {}).get("hits") or []
        if not hits:
            raise ResolutionError(page_url, f"No NARA records found for naId {na_id}")

        record = (hits[0].get("_source") or {}).get("record") or {}
        title = record.get("title") or "Untitled"
        collection = _series_collection(record)
        images, pdf_url = _split_digital_objects(record)
        logger.info(
            f"Found {len(images)} page images and {'1 PDF' if pdf_url else 'no PDF'} for naId {na_id}"
        )

        if images:
            metadata = {
                "naId": na_id,
                "scope": record.get("scopeAndContentNote"),
                "date_start": _year(record.get("coverageStartDate")),
                "date_end": _year(record.get("coverageEndDate")),
                "page_count": len(images),
            }
            return ResolvedDocument(
                url=images[0],
                title=title,
                type=DocumentType.IMAGE,
                provenance=page_url,
                collection=collection,
                metadata={k: v for k, v in metadata.items() if v is not None},
            )

        if pdf_url:
            return ResolvedDocument(
                url=pdf_url,
                title=title,
                type=DocumentType.PDF,
                provenance=page_url,
                collection=collection,
            )

        logger.warning(f"No downloadable images or PDFs found in NARA record {na_id}")
        return ResolvedDocument(
            url=page_url,
            title=title,
            type=DocumentType.UNSUPPORTED,
            provenance=page_url,
            collection=collection,
        )
