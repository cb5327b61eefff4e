"""Configuration model for wxwarn lookups."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from wxwarn.http import DEFAULT_USER_AGENT

DEFAULT_ARCHIVE_URL = (
    "https://tgftp.nws.noaa.gov/SL.us008001/DF.sha/DC.cap/DS.WWA/current_all.tar.gz"
)
DEFAULT_ALERT_API_URL = "https://api.weather.gov/alerts"


class AlertFieldNames(BaseModel):
    """dBase field names holding each part of a rendered alert."""

    headline: str = "PROD_TYPE"
    effective: str = "ISSUANCE"
    expiration: str = "EXPIRATION"
    office: str = "WFO"
    areas: str = "AREA_DESC"
    body: str = "DESCRIPTION"
    cap_id: str = "CAP_ID"


class WxWarnConfig(BaseSettings):
    """All configurable parameters for an alert lookup.

    Values can be set via constructor arguments, environment variables
    prefixed with WXWARN_ (nested fields use ``__``, e.g.
    ``WXWARN_FIELD_NAMES__OFFICE``), or defaults.
    """

    model_config = {"env_prefix": "WXWARN_", "env_nested_delimiter": "__"}

    archive_url: str = Field(
        default=DEFAULT_ARCHIVE_URL, description="URL of the alerts shapefile archive."
    )
    alert_api_url: str = Field(
        default=DEFAULT_ALERT_API_URL, description="Base URL of the NWS alerts API."
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header sent to NWS services.",
    )
    request_timeout: int = Field(
        default=60, ge=5, le=300, description="HTTP request timeout in seconds."
    )
    cache_enabled: bool = Field(
        default=True, description="Cache the downloaded archive on disk."
    )
    cache_dir: Path = Field(
        default=Path.home() / ".cache" / "wxwarn", description="Archive cache directory."
    )
    cache_ttl: int = Field(
        default=300, ge=0, description="Seconds before a cached archive is stale."
    )
    encoding: str = Field(
        default="utf-8", description="Text encoding of character attribute fields."
    )
    fetch_details: bool = Field(
        default=True, description="Fetch full alert text from the NWS alerts API."
    )
    area_delimiter: str = Field(
        default="; ", description="Separator used when rendering affected areas."
    )
    field_names: AlertFieldNames = Field(default_factory=AlertFieldNames)
