"""Normalised output of document resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath
from typing import Any
from urllib.parse import unquote, urlparse


class DocumentType(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"

    @property
    def processable(self) -> bool:
        return self in (DocumentType.IMAGE, DocumentType.PDF)


@dataclass
class ResolvedDocument:
    """A URL resolved to a fetchable media reference plus descriptive fields."""

    url: str
    title: str
    type: DocumentType
    provenance: str | None = None
    collection: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def title_from_url(url: str) -> str:
    """Percent-decoded base name of the URL path."""
    path = urlparse(url).path or url
    name = PurePosixPath(path).name
    return unquote(name) if name else url
