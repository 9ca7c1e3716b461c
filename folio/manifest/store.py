"""Load, save and query manifest files.

A manifest is a JSON array of entry objects. The file on disk is the only
persisted copy: callers reload before mutating and rewrite the whole array
afterwards.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import json
import os
from pathlib import Path
import tempfile

from folio.errors import ManifestNotFoundError, ManifestParseError

from .entry import ManifestEntry


def resolve_manifest_path(path: str | os.PathLike[str], data_dir: Path) -> Path:
    """Absolute paths are kept; anything else is taken relative to `data_dir`."""
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    return data_dir / candidate


def load_manifest(path: Path, *, missing_ok: bool = False) -> list[ManifestEntry]:
    """Read the entries of a manifest file.

    Args:
        path: Manifest location.
        missing_ok: Return an empty list for a missing file instead of raising.
            Ingestion uses this to start a new manifest.

    Raises:
        ManifestNotFoundError: The file does not exist and `missing_ok` is False.
        ManifestParseError: The file is not valid JSON or is not an array.
    """
    if not path.is_file():
        if missing_ok:
            return []
        raise ManifestNotFoundError(path)

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(path, f"invalid JSON ({exc})") from exc

    if not isinstance(raw, list):
        raise ManifestParseError(path, "root element must be an array")

    entries: list[ManifestEntry] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ManifestParseError(path, f"entry {index} is not an object")
        entries.append(ManifestEntry.from_dict(item))
    return entries


def save_manifest(path: Path, entries: Iterable[ManifestEntry]) -> None:
    """Rewrite the whole manifest.

    The new content goes to a sibling temporary file that is then renamed over
    the target, so readers never observe a half-written array.
    """
    payload = json.dumps([entry.to_dict() for entry in entries], indent=4, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def entry_exists(entries: Sequence[ManifestEntry], url: str) -> bool:
    """Exact string match on `url`."""
    return any(entry.url == url for entry in entries)
