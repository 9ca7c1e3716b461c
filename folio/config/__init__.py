"""Environment-driven configuration.

`get_settings()` returns the cached `FolioSettings` snapshot (directories,
HTTP timeouts, rasterizer and logging options).
"""

from .settings import FolioSettings, get_settings


__all__ = ["FolioSettings", "get_settings"]
