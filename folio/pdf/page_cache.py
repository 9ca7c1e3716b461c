"""Per-page image cache for PDF manifest entries.

Pages for a PDF are written as `{address}-{n}.png` into one fixed directory,
where `address` is the entry's content address. The presence of any page file
for an address means the PDF has been split; partially split documents are
not detected.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
import os
from pathlib import Path
import subprocess
import tempfile
from urllib.parse import urlparse

import requests

from folio.errors import ManifestNotFoundError, ManifestParseError
from folio.manifest import load_manifest, resolve_manifest_path
from folio.pipeline.access import is_network_url, local_path_from_file_url
from folio.pipeline.content_address import content_address
from folio.sources.resolver import is_pdf_url
from folio.utils.log_utils import logger

from .rasterize import Rasterizer, Trimmer, page_images


DOWNLOAD_CHUNK_SIZE = 1 << 16


@dataclass(slots=True)
class SplitReport:
    split: list[str] = field(default_factory=list)
    cached: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class PageImageCache:
    def __init__(
        self,
        *,
        pages_dir: Path,
        asset_root: Path,
        data_dir: Path,
        rasterizer: Rasterizer,
        trimmer: Trimmer | None = None,
        session: requests.Session | None = None,
        download_timeout: float = 120.0,
    ) -> None:
        self.pages_dir = pages_dir
        self.asset_root = asset_root
        self.data_dir = data_dir
        self.rasterizer = rasterizer
        self.trimmer = trimmer
        self.session = session or requests.Session()
        self.download_timeout = download_timeout

    def pdf_urls(self, manifest_paths: Iterable[str | Path]) -> list[str]:
        """Distinct PDF URLs across the given manifests, in first-seen order."""
        seen: dict[str, None] = {}
        for raw_path in manifest_paths:
            path = resolve_manifest_path(raw_path, self.data_dir)
            try:
                entries = load_manifest(path)
            except ManifestNotFoundError:
                logger.debug(f"No manifest at {path}; nothing to split there.")
                continue
            except ManifestParseError as exc:
                logger.warning(f"Cannot read manifest for page splitting: {exc}")
                continue
            for entry in entries:
                if entry.url and is_pdf_url(entry.url):
                    seen.setdefault(entry.url, None)
        return list(seen)

    def split_all(self, manifest_paths: Iterable[str | Path]) -> SplitReport:
        """Rasterize every PDF entry that has no cached page images yet."""
        report = SplitReport()
        if not self.rasterizer.available():
            logger.warning(
                f"Rasterizer '{self.rasterizer.name}' not available; skipping PDF page splitting."
            )
            return report

        trimmer = self.trimmer
        if trimmer is not None and not trimmer.available():
            logger.warning(f"'{trimmer.name}' not found; page images will not be trimmed.")
            trimmer = None

        for url in self.pdf_urls(manifest_paths):
            address = content_address(url)
            if page_images(self.pages_dir, address):
                logger.debug(f"Pages already cached for {url}")
                report.cached.append(url)
                continue
            if self.split_one(url, address, trimmer):
                report.split.append(url)
            else:
                report.failed.append(url)

        logger.info(
            f"PDF pages: {len(report.split)} split, {len(report.cached)} cached, "
            f"{len(report.failed)} failed."
        )
        return report

    def split_one(self, url: str, address: str, trimmer: Trimmer | None) -> bool:
        logger.info(f"Splitting {url}")
        try:
            pdf_path, is_temporary = self._local_pdf(url)
        except (requests.RequestException, OSError) as exc:
            logger.warning(f"Could not fetch {url} for page splitting: {exc}")
            return False

        try:
            pages = self.rasterizer.rasterize(pdf_path, self.pages_dir, address)
        except subprocess.TimeoutExpired:
            logger.warning(f"Rasterizing {url} timed out.")
            return False
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or b"").decode("utf-8", errors="replace").strip()
            logger.warning(f"Rasterizing {url} failed: {detail or exc}")
            return False
        except Exception as exc:
            logger.warning(f"Rasterizing {url} failed: {exc}")
            return False
        finally:
            if is_temporary:
                pdf_path.unlink(missing_ok=True)

        logger.info(f"  {len(pages)} page image(s) written for {address}")
        if trimmer is not None and pages:
            try:
                trimmer.trim(pages)
            except (subprocess.SubprocessError, OSError) as exc:
                logger.warning(f"Trimming pages of {url} failed: {exc}")
        return True

    def _local_pdf(self, url: str) -> tuple[Path, bool]:
        """Return a local path for `url` and whether it is a temporary download."""
        if urlparse(url).scheme.lower() == "file":
            return local_path_from_file_url(url), False
        if not is_network_url(url):
            return (self.asset_root / url.lstrip("/")).resolve(), False

        fd, tmp_name = tempfile.mkstemp(prefix="folio-", suffix=".pdf")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                with self.session.get(url, timeout=self.download_timeout, stream=True) as response:
                    response.raise_for_status()
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        return tmp_path, True
