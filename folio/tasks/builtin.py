"""Built-in tasks that need no model credentials.

They give every installation a usable default pipeline and double as
examples of the task contract: `task(inputs, prior) -> payload`.
"""

from __future__ import annotations

from collections.abc import Mapping
from io import BytesIO
import mimetypes
from typing import Any
from urllib.parse import urlparse

from PIL import Image, UnidentifiedImageError
import requests

from folio.config.settings import get_settings
from folio.errors import TaskSkipped
from folio.pipeline.access import local_path_from_file_url
from folio.pipeline.tasks import TaskRegistry
from folio.sources.resolver import is_pdf_url


def _read_bytes(url: str, timeout: float) -> bytes:
    if urlparse(url).scheme.lower() == "file":
        return local_path_from_file_url(url).read_bytes()
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def media_probe(inputs: Mapping[str, Any], prior: Mapping[str, Any]) -> dict[str, Any]:
    """Content type and size of the media file."""
    url = str(inputs["image_url"])
    if urlparse(url).scheme.lower() == "file":
        path = local_path_from_file_url(url)
        content_type, _ = mimetypes.guess_type(path.name)
        return {"content_type": content_type, "size_bytes": path.stat().st_size}

    timeout = get_settings().http.probe_timeout
    response = requests.head(url, timeout=timeout, allow_redirects=True)
    response.raise_for_status()
    length = response.headers.get("Content-Length")
    return {
        "content_type": response.headers.get("Content-Type"),
        "size_bytes": int(length) if length and length.isdigit() else None,
    }


def image_metadata(inputs: Mapping[str, Any], prior: Mapping[str, Any]) -> dict[str, Any]:
    """Pixel dimensions, mode and format of a raster image."""
    url = str(inputs["image_url"])
    if is_pdf_url(url):
        raise TaskSkipped("PDF documents are described per page after splitting")

    data = _read_bytes(url, get_settings().http.download_timeout)
    try:
        with Image.open(BytesIO(data)) as img:
            return {
                "width": img.width,
                "height": img.height,
                "mode": img.mode,
                "format": img.format,
                "frames": getattr(img, "n_frames", 1),
            }
    except UnidentifiedImageError as exc:
        raise ValueError(f"Not a readable image: {url}") from exc


def register_builtin_tasks(registry: TaskRegistry) -> None:
    registry.register("media_probe", media_probe)
    registry.register("image_metadata", image_metadata)
