"""Omeka-S item resolution.

An item page `https://{host}/s/{site}/item/{id}` is backed by the REST API at
`https://{host}/api/items/{id}`. The item points at item sets (collections)
and media records; the first media record carries the downloadable file.
"""

from __future__ import annotations

import re
from typing import Any

import requests

from folio.errors import ResolutionError
from folio.utils.log_utils import logger

from .catalog import CatalogClient
from .types import DocumentType, ResolvedDocument


ITEM_PAGE_PATTERN = re.compile(r"^(https?://[^/]+\.omeka\.net)/s/([^/]+)/item/(\d+)")

COLLECTION_TIMEOUT = 10.0
MEDIA_TIMEOUT = 10.0

_VIDEO_EMBED_PATTERN = re.compile(r"vimeo|youtube", re.IGNORECASE)

DUBLIN_CORE_FIELDS: dict[str, str] = {
    "dcterms:description": "description",
    "dcterms:date": "date",
    "dcterms:creator": "creator",
    "dcterms:publisher": "publisher",
    "dcterms:type": "type",
    "dcterms:language": "language",
    "dcterms:coverage": "coverage",
    "dcterms:rights": "rights",
    "dcterms:subject": "subject",
}


def match_item_page(url: str) -> tuple[str, int] | None:
    """Return `(base_url, item_id)` for an Omeka-S item page URL."""
    match = ITEM_PAGE_PATTERN.match(url)
    if match is None:
        return None
    return match.group(1), int(match.group(3))


def extract_dublin_core(item: dict[str, Any]) -> dict[str, Any]:
    """Flatten `dcterms:*` value lists into scalars or lists of strings."""
    metadata: dict[str, Any] = {}
    for dc_field, key in DUBLIN_CORE_FIELDS.items():
        raw_values = item.get(dc_field) or []
        values = [
            value["@value"]
            for value in raw_values
            if isinstance(value, dict) and value.get("@value")
        ]
        if len(values) == 1:
            metadata[key] = values[0]
        elif values:
            metadata[key] = values
    return metadata


def _item_title(item: dict[str, Any]) -> str:
    if item.get("o:title"):
        return str(item["o:title"])
    titles = item.get("dcterms:title") or []
    if titles and isinstance(titles[0], dict) and titles[0].get("@value"):
        return str(titles[0]["@value"])
    return "Untitled"


def _first_reference(item: dict[str, Any], key: str) -> str | None:
    refs = item.get(key) or []
    if refs and isinstance(refs[0], dict):
        return refs[0].get("@id")
    return None


class OmekaResolver:
    def __init__(self, client: CatalogClient) -> None:
        self.client = client

    def resolve(self, page_url: str, base_url: str, item_id: int) -> ResolvedDocument:
        api_url = f"{base_url}/api/items/{item_id}"
        logger.info(f"Fetching Omeka item: {api_url}")
        try:
            item = self.client.get_json(api_url)
        except requests.RequestException as exc:
            raise ResolutionError(page_url, f"Failed to fetch Omeka item ({exc})") from exc
        if not isinstance(item, dict):
            raise ResolutionError(page_url, "Omeka item response is not an object")

        title = _item_title(item)
        collection = self._collection_name(item)

        media_url: str | None = None
        media_type: str | None = None
        media_ref = _first_reference(item, "o:media")
        if media_ref:
            logger.info(f"Fetching Omeka media: {media_ref}")
            try:
                media = self.client.get_json(media_ref, timeout=MEDIA_TIMEOUT)
            except requests.RequestException as exc:
                logger.warning(f"Could not fetch media details for {page_url}: {exc}")
                media = {}
            if isinstance(media, dict):
                media_url = media.get("o:original_url")
                media_type = media.get("o:media_type")
                if media.get("o:ingester") == "html" and self._is_video_embed(media):
                    return ResolvedDocument(
                        url=page_url,
                        title=title,
                        type=DocumentType.VIDEO,
                        provenance=page_url,
                        collection=collection,
                    )

        if not media_url:
            logger.warning(f"No downloadable media file found on Omeka item {page_url}")
            return ResolvedDocument(
                url=page_url,
                title=title,
                type=DocumentType.UNSUPPORTED,
                provenance=page_url,
                collection=collection,
            )

        is_pdf = media_type == "application/pdf" or media_url.lower().endswith(".pdf")
        return ResolvedDocument(
            url=media_url,
            title=title,
            type=DocumentType.PDF if is_pdf else DocumentType.IMAGE,
            provenance=page_url,
            collection=collection,
            metadata=extract_dublin_core(item),
        )

    def _collection_name(self, item: dict[str, Any]) -> str | None:
        set_ref = _first_reference(item, "o:item_set")
        if not set_ref:
            return None
        try:
            item_set = self.client.get_json(set_ref, timeout=COLLECTION_TIMEOUT)
        except requests.RequestException as exc:
            logger.warning(f"Could not fetch Omeka item set {set_ref}: {exc}")
            return None
        if isinstance(item_set, dict) and item_set.get("o:title"):
            return str(item_set["o:title"])
        return None

    @staticmethod
    def _is_video_embed(media: dict[str, Any]) -> bool:
        data = media.get("data")
        html = ""
        if isinstance(data, dict):
            html = data.get("html") or ""
        html = html or media.get("o-cnt:chars") or ""
        return bool(_VIDEO_EMBED_PATTERN.search(str(html)))
