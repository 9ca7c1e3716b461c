"""PDF page splitting.

``PageImageCache.split_all`` rasterizes each PDF entry of a set of manifests
into page images keyed by content address, skipping documents whose pages are
already cached. Rasterization goes through a ``Rasterizer`` (``pdftoppm`` by
default, PyMuPDF as an in-process alternative) and pages are optionally
trimmed in place by a ``Trimmer``.
"""

from .page_cache import PageImageCache, SplitReport
from .rasterize import (
    MogrifyTrimmer,
    PdftoppmRasterizer,
    PyMuPDFRasterizer,
    Rasterizer,
    Trimmer,
    build_rasterizer,
    page_images,
)


__all__ = [
    "MogrifyTrimmer",
    "PageImageCache",
    "PdftoppmRasterizer",
    "PyMuPDFRasterizer",
    "Rasterizer",
    "SplitReport",
    "Trimmer",
    "build_rasterizer",
    "page_images",
]
