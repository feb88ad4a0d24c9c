import httpx
import logging
from typing import Optional, Dict

# Page fetches for scraping and fingerprinting share one request profile
DEFAULT_TIMEOUT = 15.0
DEFAULT_CONNECT_TIMEOUT = 5.0
MAX_REDIRECTS = 10

USER_AGENT = "Mozilla/5.0 (compatible; SaaSScorer/1.0)"
DEFAULT_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
}

logger = logging.getLogger(__name__)


def _request_headers(extra: Optional[Dict[str, str]]) -> Dict[str, str]:
    headers = dict(DEFAULT_HEADERS)
    if extra:
        headers.update(extra)
    return headers


async def fetch_url(
    url: str,
    timeout: Optional[float] = None,
    connect_timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
) -> httpx.Response:
    """
    GET a page, following redirects.

    The status code is not checked: the scraper treats non-2xx as a failure
    while fingerprinting still reads headers from error pages.

    Args:
        url: Page to fetch
        timeout: Total request timeout in seconds (default: 15s)
        connect_timeout: Connection timeout in seconds (default: 5s)
        headers: Extra headers merged over the defaults

    Raises:
        httpx.HTTPError: on timeouts, connection and protocol errors
    """
    timeout_config = httpx.Timeout(
        timeout=timeout or DEFAULT_TIMEOUT,
        connect=connect_timeout or DEFAULT_CONNECT_TIMEOUT
    )
    logger.debug(f"GET {url} (timeout: {timeout_config.read}s)")

    try:
        async with httpx.AsyncClient(
            timeout=timeout_config,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
            headers=_request_headers(headers),
        ) as client:
            response = await client.get(url)
    except httpx.TimeoutException as e:
        logger.warning(f"Timed out fetching {url}: {e}")
        raise
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch {url}: {e}")
        raise

    logger.debug(f"{response.status_code} {response.url} ({len(response.content)} bytes)")
    return response
