"""Manifest-driven, resumable batch processing for archival documents."""

__version__ = "0.3.0"
