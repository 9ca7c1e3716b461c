"""Manifest entries and their JSON persistence."""

from .entry import EntryStatus, ManifestEntry
from .store import entry_exists, load_manifest, resolve_manifest_path, save_manifest


__all__ = [
    "EntryStatus",
    "ManifestEntry",
    "entry_exists",
    "load_manifest",
    "resolve_manifest_path",
    "save_manifest",
]
