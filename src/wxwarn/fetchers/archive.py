"""NWS watch/warning/advisory shapefile archive fetcher."""

from __future__ import annotations

import io
import logging
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from requests import Session

from wxwarn.cache import cache_evict, cache_get, cache_put
from wxwarn.errors import ArchiveError

logger = logging.getLogger(__name__)

_CACHE_KEY = "current_all.tar.gz"


@dataclass(frozen=True)
class ShapefilePayloads:
    """Raw .shp and .dbf bytes unpacked from one archive."""

    shp: bytes
    dbf: bytes
    name: str


def unpack_shapefile(archive: bytes) -> ShapefilePayloads:
    """Extract the .shp/.dbf pair from a gzipped tar archive held in memory.

    When the archive holds several pairs, the first .shp with a matching
    .dbf stem is used.
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tar:
            members = {
                PurePosixPath(m.name): m for m in tar.getmembers() if m.isfile()
            }
            for path, member in members.items():
                if path.suffix.lower() != ".shp":
                    continue
                dbf_member = next(
                    (
                        m for p, m in members.items()
                        if p.with_suffix("") == path.with_suffix("")
                        and p.suffix.lower() == ".dbf"
                    ),
                    None,
                )
                if dbf_member is None:
                    continue
                shp_file = tar.extractfile(member)
                dbf_file = tar.extractfile(dbf_member)
                if shp_file is None or dbf_file is None:
                    continue
                logger.debug("Unpacked %s and %s", member.name, dbf_member.name)
                return ShapefilePayloads(
                    shp=shp_file.read(), dbf=dbf_file.read(), name=path.stem,
                )
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise ArchiveError(f"cannot unpack alerts archive: {exc}") from exc

    raise ArchiveError("alerts archive contains no .shp/.dbf pair")


def fetch_archive(url: str, session: Session, timeout: int = 60) -> bytes:
    """Download the alerts archive bytes."""
    logger.info("Downloading alerts archive from %s", url)
    resp = session.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.content


def _load_cached(cache_dir: Path, max_age_seconds: int) -> ShapefilePayloads | None:
    cached = cache_get(cache_dir, _CACHE_KEY, max_age_seconds)
    if cached is None:
        return None
    try:
        payloads = unpack_shapefile(cached)
    except ArchiveError as exc:
        logger.warning("Discarding unusable cached alerts archive: %s", exc)
        cache_evict(cache_dir, _CACHE_KEY)
        return None
    logger.info("Using cached alerts archive")
    return payloads


def fetch_shapefile(
    url: str,
    session: Session,
    timeout: int = 60,
    cache_dir: Path | None = None,
    max_age_seconds: int = 300,
) -> ShapefilePayloads:
    """Download (or load cached) and unpack the current alerts shapefile.

    A download is cached only after it unpacks into a .shp/.dbf pair, so an
    error page served with status 200 is never reused.
    """
    if cache_dir is not None:
        payloads = _load_cached(cache_dir, max_age_seconds)
        if payloads is not None:
            return payloads

    archive = fetch_archive(url, session, timeout)
    payloads = unpack_shapefile(archive)
    if cache_dir is not None:
        cache_put(cache_dir, _CACHE_KEY, archive)
    return payloads
