"""NWS alerts API client for full alert text."""

from __future__ import annotations

import logging
from typing import Any

from requests import Session

from wxwarn.config import AlertFieldNames
from wxwarn.models import FieldValue, MatchResult

logger = logging.getLogger(__name__)


def fetch_alert_details(
    cap_id: str,
    session: Session,
    api_url: str,
    timeout: int = 30,
) -> dict[str, Any] | None:
    """Fetch the ``properties`` of one alert from api.weather.gov.

    Returns None on HTTP errors or network failures (non-fatal).
    """
    url = f"{api_url.rstrip('/')}/{cap_id}"
    try:
        resp = session.get(
            url, headers={"Accept": "application/geo+json"}, timeout=timeout,
        )
        if resp.status_code != 200:
            logger.warning("Alert detail %s returned %d", cap_id, resp.status_code)
            return None
        return resp.json()["properties"]  # type: ignore[no-any-return]
    except Exception:
        logger.warning("Failed to fetch alert detail %s", cap_id, exc_info=True)
        return None


def _detail_text(properties: dict[str, Any]) -> str:
    parts = [properties.get("description") or "", properties.get("instruction") or ""]
    return "\n\n".join(p.strip() for p in parts if p and p.strip())


def enrich_match(
    match: MatchResult,
    properties: dict[str, Any],
    fields: AlertFieldNames,
) -> MatchResult:
    """Overlay API alert properties onto a match's attribute record.

    Only properties present and non-empty replace shapefile values.
    """
    overlay = {
        fields.headline: properties.get("event"),
        fields.effective: properties.get("effective"),
        fields.expiration: properties.get("expires"),
        fields.office: properties.get("senderName"),
        fields.areas: properties.get("areaDesc"),
        fields.body: _detail_text(properties),
    }
    values = {
        name: FieldValue("text", str(value)) for name, value in overlay.items() if value
    }
    return MatchResult(index=match.index, record=match.record.updated(values))


def enrich_matches(
    matches: list[MatchResult],
    session: Session,
    api_url: str,
    fields: AlertFieldNames,
    timeout: int = 30,
) -> list[MatchResult]:
    """Enrich every match that carries a CAP identifier, keeping order."""
    enriched: list[MatchResult] = []
    for match in matches:
        cap_id = match.record.text(fields.cap_id).strip()
        properties = (
            fetch_alert_details(cap_id, session, api_url, timeout) if cap_id else None
        )
        if properties is None:
            enriched.append(match)
            continue
        enriched.append(enrich_match(match, properties, fields))
    return enriched
