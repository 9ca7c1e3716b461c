"""Classify a URL and normalise it into a manifest-ready document.

Detectors run in a fixed priority order and the first one that recognises the
URL wins:

1. Omeka-S item page
2. National Archives catalog record
3. direct PDF link
4. direct image link

Anything else is a `ResolutionError`.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import re

from folio.errors import UnrecognizedUrlError
from folio.utils.log_utils import logger

from .catalog import CatalogClient
from .nara import NaraResolver, match_record_page
from .omeka import OmekaResolver, match_item_page
from .types import DocumentType, ResolvedDocument, title_from_url


PDF_PATTERN = re.compile(r"\.pdf(\?.*)?$", re.IGNORECASE)
IMAGE_PATTERN = re.compile(r"\.(jpe?g|png|gif|webp|avif|tiff?)(\?.*)?$", re.IGNORECASE)

SUPPORTED_HINT = "Supported: Omeka-S item pages, NARA catalog pages, direct .pdf/.jpg URLs"


def is_pdf_url(url: str) -> bool:
    return bool(PDF_PATTERN.search(url))


def is_image_url(url: str) -> bool:
    return bool(IMAGE_PATTERN.search(url))


@dataclass(frozen=True)
class Detector:
    """A named URL classifier; `handle` returns None when the URL is not its kind."""

    label: str
    handle: Callable[[str], ResolvedDocument | None]


class DocumentResolver:
    def __init__(self, client: CatalogClient | None = None) -> None:
        self.client = client or CatalogClient()
        self.omeka = OmekaResolver(self.client)
        self.nara = NaraResolver(self.client)
        self.detectors: Sequence[Detector] = (
            Detector("Omeka-S item page", self._omeka),
            Detector("National Archives catalog record", self._nara),
            Detector("Direct PDF URL", self._direct_pdf),
            Detector("Direct image URL", self._direct_image),
        )

    def resolve(self, url: str) -> ResolvedDocument:
        """Resolve `url` into a `ResolvedDocument`.

        Raises:
            UnrecognizedUrlError: The URL matches no detector.
            ResolutionError: The primary catalog record could not be fetched.
        """
        url = url.strip()
        for detector in self.detectors:
            document = detector.handle(url)
            if document is not None:
                logger.info(f"Detected: [green]{detector.label}[/green]")
                return document
        raise UnrecognizedUrlError(url)

    def _omeka(self, url: str) -> ResolvedDocument | None:
        matched = match_item_page(url)
        if matched is None:
            return None
        base_url, item_id = matched
        return self.omeka.resolve(url, base_url, item_id)

    def _nara(self, url: str) -> ResolvedDocument | None:
        na_id = match_record_page(url)
        if na_id is None:
            return None
        return self.nara.resolve(url, na_id)

    @staticmethod
    def _direct_pdf(url: str) -> ResolvedDocument | None:
        if not is_pdf_url(url):
            return None
        return ResolvedDocument(url=url, title=title_from_url(url), type=DocumentType.PDF)

    @staticmethod
    def _direct_image(url: str) -> ResolvedDocument | None:
        if not is_image_url(url):
            return None
        return ResolvedDocument(url=url, title=title_from_url(url), type=DocumentType.IMAGE)
