"""PDF rasterizers and page-image trimmers."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import shutil
import subprocess
from typing import Protocol

import fitz  # PyMuPDF

from folio.utils.log_utils import logger


PAGE_IMAGE_EXTENSION = ".png"


class Rasterizer(Protocol):
    name: str

    def available(self) -> bool: ...

    def rasterize(self, pdf_path: Path, output_dir: Path, prefix: str) -> list[Path]:
        """Write one image per page as `{prefix}-{n}.png` and return the paths."""
        ...


class Trimmer(Protocol):
    name: str

    def available(self) -> bool: ...

    def trim(self, image_paths: Sequence[Path]) -> None: ...


def page_images(output_dir: Path, prefix: str) -> list[Path]:
    """Existing page images for `prefix`, in page order."""
    if not output_dir.is_dir():
        return []

    def _page_number(path: Path) -> int:
        suffix = path.stem.rsplit("-", 1)[-1]
        return int(suffix) if suffix.isdigit() else 0

    return sorted(output_dir.glob(f"{prefix}-*{PAGE_IMAGE_EXTENSION}"), key=_page_number)


class PdftoppmRasterizer:
    """Poppler's `pdftoppm` in PNG mode at a fixed resolution."""

    name = "pdftoppm"

    def __init__(self, *, dpi: int = 150, timeout: float = 300.0, binary: str = "pdftoppm") -> None:
        self.dpi = dpi
        self.timeout = timeout
        self.binary = binary

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def rasterize(self, pdf_path: Path, output_dir: Path, prefix: str) -> list[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        cmd = [
            self.binary,
            "-png",
            "-r",
            str(self.dpi),
            str(pdf_path),
            str(output_dir / prefix),
        ]
        logger.debug(f"Running {' '.join(cmd)}")
        subprocess.run(cmd, check=True, capture_output=True, timeout=self.timeout)
        return page_images(output_dir, prefix)


class PyMuPDFRasterizer:
    """In-process rasterization with PyMuPDF."""

    name = "pymupdf"

    def __init__(self, *, dpi: int = 150) -> None:
        self.dpi = dpi

    def available(self) -> bool:
        return True

    def rasterize(self, pdf_path: Path, output_dir: Path, prefix: str) -> list[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        zoom = max(self.dpi, 1) / 72.0
        written: list[Path] = []
        with fitz.open(pdf_path) as doc:
            for page_number in range(doc.page_count):
                pix = doc[page_number].get_pixmap(matrix=fitz.Matrix(zoom, zoom))  # type: ignore[attr-defined]
                target = output_dir / f"{prefix}-{page_number + 1}{PAGE_IMAGE_EXTENSION}"
                pix.save(str(target))
                written.append(target)
        return written


class MogrifyTrimmer:
    """ImageMagick `mogrify -trim`, applied in place."""

    name = "mogrify"

    def __init__(self, *, binary: str = "mogrify", timeout: float = 120.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def trim(self, image_paths: Sequence[Path]) -> None:
        if not image_paths:
            return
        cmd = [self.binary, "-trim", "+repage", *(str(path) for path in image_paths)]
        subprocess.run(cmd, check=True, capture_output=True, timeout=self.timeout)


def build_rasterizer(engine: str, *, dpi: int, timeout: float) -> Rasterizer:
    if engine == PyMuPDFRasterizer.name:
        return PyMuPDFRasterizer(dpi=dpi)
    if engine != PdftoppmRasterizer.name:
        logger.warning(f"Unknown rasterizer '{engine}'; using pdftoppm.")
    return PdftoppmRasterizer(dpi=dpi, timeout=timeout)
