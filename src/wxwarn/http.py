"""HTTP session for the NWS archive server and alerts API."""

from __future__ import annotations

from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT = "(wxwarn, https://github.com/hrbrmstr/wxwarn)"

# api.weather.gov answers bursts with 429 plus Retry-After; tgftp flaps with 5xx.
RETRY_STATUSES = (429, 500, 502, 503, 504)


def create_session(
    user_agent: str = DEFAULT_USER_AGENT,
    retries: int = 3,
    backoff_factor: float = 0.5,
    status_forcelist: tuple[int, ...] = RETRY_STATUSES,
) -> Session:
    """Create a requests Session identified to NWS, with GET retry/backoff.

    api.weather.gov rejects requests without a User-Agent, so one is always
    set. A Retry-After header from the server takes precedence over the
    backoff schedule (0s, 0.5s, 1s with the default factor).
    """
    if not user_agent.strip():
        raise ValueError("NWS services require a non-empty User-Agent")
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=status_forcelist,
        allowed_methods=["GET"],
        respect_retry_after_header=True,
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session = Session()
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers["User-Agent"] = user_agent
    return session
