"""Content addresses: the join key between entries, results and page images.

The address is the SHA-1 of the entry's `url` string exactly as written in the
manifest, never of its resolved absolute form. Editing a `url` (for example
rewriting `images/a.jpg` to an absolute URL for the same file) therefore
yields a new address and orphans the results stored under the old one.
"""

from __future__ import annotations

import hashlib


RESULT_EXTENSION = ".json"


def content_address(url: str) -> str:
    return hashlib.sha1(url.encode("utf-8")).hexdigest()


def result_file_name(url: str) -> str:
    return f"{content_address(url)}{RESULT_EXTENSION}"
