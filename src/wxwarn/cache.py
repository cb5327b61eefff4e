"""On-disk cache for downloaded alert archives.

Each entry is the raw archive plus a JSON ``.meta`` side-car holding the
download time, byte size and SHA-256 digest. An entry whose bytes no longer
match its side-car (a partial write, a truncated copy) is treated as a miss.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def get_cache_dir(cache_dir: Path) -> Path:
    """Return the cache directory, creating it if needed."""
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def _meta_path(cache_dir: Path, key: str) -> Path:
    return cache_dir / f"{key}.meta"


def cache_get(cache_dir: Path, key: str, max_age_seconds: int) -> bytes | None:
    """Return cached bytes if fresh and intact, else None."""
    data_path = cache_dir / key
    meta_path = _meta_path(cache_dir, key)

    if not data_path.exists() or not meta_path.exists():
        return None

    try:
        meta = json.loads(meta_path.read_text())
        age = time.time() - meta["timestamp"]
        size = meta["size"]
        digest = meta["sha256"]
    except (json.JSONDecodeError, KeyError, TypeError):
        return None
    if age > max_age_seconds:
        logger.debug("Cache expired for %s (%.0fs old)", key, age)
        return None

    data = data_path.read_bytes()
    if len(data) != size or hashlib.sha256(data).hexdigest() != digest:
        logger.warning("Cached %s does not match its metadata, ignoring it", key)
        return None

    logger.debug("Cache hit for %s", key)
    return data


def cache_put(cache_dir: Path, key: str, data: bytes) -> None:
    """Store bytes with their timestamp, size and digest.

    The data file is written under a temporary name and renamed into place,
    so a reader never sees a half-written archive under ``key``.
    """
    cache_dir = get_cache_dir(cache_dir)
    data_path = cache_dir / key
    partial = cache_dir / f"{key}.part"
    partial.write_bytes(data)
    partial.replace(data_path)
    _meta_path(cache_dir, key).write_text(
        json.dumps(
            {
                "timestamp": time.time(),
                "size": len(data),
                "sha256": hashlib.sha256(data).hexdigest(),
            }
        )
    )
    logger.debug("Cached %s (%d bytes)", key, len(data))


def cache_evict(cache_dir: Path, key: str) -> None:
    """Remove an entry and its metadata; missing files are ignored."""
    for path in (cache_dir / key, _meta_path(cache_dir, key)):
        path.unlink(missing_ok=True)
    logger.debug("Evicted %s", key)
