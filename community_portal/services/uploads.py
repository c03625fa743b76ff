# community_portal/services/uploads.py
"""
Attachment intake for community requests.

All files in a request are checked (count, MIME type, size) before any of
them touches the disk; one bad file rejects the whole request.
"""

from __future__ import annotations

import logging
import os
import random
import time
from pathlib import Path
from typing import Iterable, List, Optional

from werkzeug.datastructures import FileStorage

from community_portal.errors import FileConstraintError

log = logging.getLogger(__name__)

MAX_FILES = 5
MAX_FILE_BYTES = 10 * 1024 * 1024
PUBLIC_PREFIX = "/uploads/"

ALLOWED_MIME_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "video/mp4",
        "video/quicktime",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


def _size_of(upload: FileStorage) -> int:
    stream = upload.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def present_files(files: Iterable[FileStorage]) -> List[FileStorage]:
    """Drop empty file inputs (browsers send one with no filename)."""
    return [f for f in files if f is not None and (f.filename or "").strip()]


def validate_files(
    files: List[FileStorage],
    *,
    max_files: int = MAX_FILES,
    max_bytes: int = MAX_FILE_BYTES,
) -> None:
    if len(files) > max_files:
        raise FileConstraintError(f"Too many files: at most {max_files} allowed")

    for upload in files:
        name = upload.filename or "file"
        mimetype = (upload.mimetype or "").lower()
        if mimetype not in ALLOWED_MIME_TYPES:
            raise FileConstraintError(f"Invalid file type for {name}: {mimetype or 'unknown'}")
        if _size_of(upload) > max_bytes:
            raise FileConstraintError(f"File too large: {name} exceeds {max_bytes // (1024 * 1024)} MB")


def _safe_suffix(original: Optional[str]) -> str:
    # taken from the raw name so non-ASCII stems keep their extension
    suffix = Path(original or "").suffix.lower()
    ext = suffix[1:]
    return suffix if ext.isascii() and ext.isalnum() else ""


def stored_name(original: Optional[str]) -> str:
    ext = _safe_suffix(original)
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


def store_files(files: List[FileStorage], upload_dir: str) -> List[str]:
    """Write already-validated files; returns public paths (/uploads/<name>) in order."""
    folder = Path(upload_dir)
    folder.mkdir(parents=True, exist_ok=True)

    urls: List[str] = []
    try:
        for upload in files:
            name = stored_name(upload.filename)
            upload.stream.seek(0)
            upload.save(str(folder / name))
            urls.append(PUBLIC_PREFIX + name)
    except OSError:
        log.error("Upload write failed after %d file(s); removing partial set", len(urls), exc_info=True)
        remove_files(urls, upload_dir)
        raise
    return urls


def remove_files(urls: Iterable[str], upload_dir: str) -> None:
    folder = Path(upload_dir)
    for url in urls:
        name = url[len(PUBLIC_PREFIX):] if url.startswith(PUBLIC_PREFIX) else url
        path = folder / name
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError:
            log.warning("Could not remove orphaned upload %s", path, exc_info=True)


__all__ = [
    "ALLOWED_MIME_TYPES",
    "MAX_FILES",
    "MAX_FILE_BYTES",
    "PUBLIC_PREFIX",
    "present_files",
    "validate_files",
    "stored_name",
    "store_files",
    "remove_files",
]
