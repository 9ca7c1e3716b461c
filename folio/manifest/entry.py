"""Manifest entry model."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntryStatus(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"


# Keys owned by the dataclass; anything else found in the JSON is preserved in `extra`.
_KNOWN_KEYS = (
    "url",
    "title",
    "collection",
    "provenance",
    "pipeline",
    "metadata",
    "inputs",
    "result_file",
    "status",
)


@dataclass
class ManifestEntry:
    """One document to process.

    `url` is the identity key: it deduplicates entries within a manifest and
    is hashed into the content address. `metadata` and `inputs` are opaque
    and passed through unmodified.
    """

    url: str | None
    title: str | None = None
    collection: str | None = None
    provenance: str | None = None
    pipeline: list[str] = field(default_factory=list)
    metadata: dict[str, Any] | None = None
    inputs: dict[str, Any] | None = None
    result_file: str | None = None
    status: EntryStatus = EntryStatus.PENDING
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.title or self.url or "(no url)"

    def mark_complete(self, result_file: str) -> None:
        self.result_file = result_file
        self.status = EntryStatus.COMPLETE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ManifestEntry:
        raw_status = data.get("status")
        try:
            status = EntryStatus(raw_status) if raw_status else EntryStatus.PENDING
        except ValueError:
            status = EntryStatus.PENDING
        pipeline = data.get("pipeline") or []
        return cls(
            url=data.get("url"),
            title=data.get("title"),
            collection=data.get("collection"),
            provenance=data.get("provenance"),
            pipeline=[str(name) for name in pipeline],
            metadata=data.get("metadata"),
            inputs=data.get("inputs"),
            result_file=data.get("result_file"),
            status=status,
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise for the manifest file, dropping unset optional fields."""
        data: dict[str, Any] = {
            "url": self.url,
            "provenance": self.provenance,
            "title": self.title,
            "collection": self.collection,
            "pipeline": list(self.pipeline),
            "metadata": self.metadata or None,
            "inputs": self.inputs or None,
            "result_file": self.result_file,
        }
        if self.result_file is not None or self.status is not EntryStatus.PENDING:
            data["status"] = self.status.value
        data = {k: v for k, v in data.items() if v is not None}
        data.update(self.extra)
        return data
