"""FastAPI wrapper for alert lookups."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse
from requests import RequestException

from wxwarn import __version__
from wxwarn.alerts import match_to_dict, render_alerts
from wxwarn.config import WxWarnConfig
from wxwarn.errors import WxWarnError
from wxwarn.pipeline import lookup_alerts

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncGenerator[None, None]:
    """Store startup state for the /health endpoint."""
    application.state.start_time = datetime.now(tz=timezone.utc)
    application.state.last_lookup = None
    application.state.lookup_count = 0
    yield


app = FastAPI(
    title="wxwarn API",
    description="NOAA weather alerts in force at a latitude/longitude.",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/health")
def health() -> dict[str, Any]:
    """Server health check with uptime, version, and lookup count."""
    now = datetime.now(tz=timezone.utc)
    return {
        "status": "ok",
        "version": __version__,
        "uptime_seconds": round((now - app.state.start_time).total_seconds(), 1),
        "last_lookup": (
            app.state.last_lookup.isoformat() if app.state.last_lookup else None
        ),
        "lookup_count": app.state.lookup_count,
    }


@app.get("/alerts")
def get_alerts(
    lat: Annotated[float, Query(ge=-90.0, le=90.0, description="Latitude.")],
    lon: Annotated[float, Query(ge=-180.0, le=180.0, description="Longitude.")],
    details: Annotated[
        bool, Query(description="Fetch full alert text from api.weather.gov."),
    ] = True,
    no_cache: Annotated[bool, Query(description="Disable archive caching.")] = False,
) -> JSONResponse:
    """Return rendered alert text and raw fields for every covering alert."""
    config = WxWarnConfig(fetch_details=details, cache_enabled=not no_cache)

    try:
        matches = lookup_alerts(config, lat, lon)
        blocks = render_alerts(matches, config.field_names, config.area_delimiter)
    except (WxWarnError, RequestException) as exc:
        logger.exception("Lookup failed")
        return JSONResponse(
            status_code=502,
            content={"detail": f"Upstream alert data error: {exc}"},
        )

    app.state.last_lookup = datetime.now(tz=timezone.utc)
    app.state.lookup_count += 1

    return JSONResponse(
        content={
            "lat": lat,
            "lon": lon,
            "count": len(matches),
            "alerts": blocks,
            "matches": [match_to_dict(m) for m in matches],
        }
    )
