"""Document-source resolution: catalog APIs and direct media links."""

from .catalog import CatalogClient
from .resolver import DocumentResolver, is_image_url, is_pdf_url
from .types import DocumentType, ResolvedDocument


__all__ = [
    "CatalogClient",
    "DocumentResolver",
    "DocumentType",
    "ResolvedDocument",
    "is_image_url",
    "is_pdf_url",
]
