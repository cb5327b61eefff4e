"""Lookup orchestrator: fetch -> unpack -> parse -> match -> enrich."""

from __future__ import annotations

import logging

from requests import Session

from wxwarn.alerts import load_dataset, match_alerts, render_alerts
from wxwarn.config import WxWarnConfig
from wxwarn.fetchers.archive import fetch_shapefile
from wxwarn.fetchers.nws import enrich_matches
from wxwarn.http import create_session
from wxwarn.models import MatchResult, Point

logger = logging.getLogger(__name__)


def lookup_alerts(
    config: WxWarnConfig,
    lat: float,
    lon: float,
    session: Session | None = None,
) -> list[MatchResult]:
    """Return the alerts in force at (lat, lon), in shapefile order.

    Steps:
    1. Fetch the alerts archive (or reuse a fresh cached copy)
    2. Unpack the .shp/.dbf pair in memory
    3. Parse both payloads and check their alignment
    4. Match shapes containing the point
    5. Optionally overlay full alert text from the NWS alerts API
    """
    if session is None:
        session = create_session(user_agent=config.user_agent)

    # Steps 1-2: Fetch and unpack
    payloads = fetch_shapefile(
        config.archive_url,
        session,
        timeout=config.request_timeout,
        cache_dir=config.cache_dir if config.cache_enabled else None,
        max_age_seconds=config.cache_ttl,
    )

    # Step 3: Parse
    dataset = load_dataset(payloads.shp, payloads.dbf, encoding=config.encoding)
    logger.info("Loaded %d alert polygons from %s", len(dataset.shapes), payloads.name)

    # Step 4: Match
    matches = match_alerts(dataset.shapes, dataset.attributes, Point.from_lat_lon(lat, lon))
    logger.info("Alerts covering (%s, %s): %d", lat, lon, len(matches))

    # Step 5: Enrich
    if matches and config.fetch_details:
        matches = enrich_matches(
            matches,
            session,
            config.alert_api_url,
            config.field_names,
            timeout=config.request_timeout,
        )
    return matches


def run_lookup(
    config: WxWarnConfig,
    lat: float,
    lon: float,
    session: Session | None = None,
) -> list[str]:
    """Look up and render alert text blocks for (lat, lon)."""
    matches = lookup_alerts(config, lat, lon, session=session)
    return render_alerts(matches, config.field_names, config.area_delimiter)
