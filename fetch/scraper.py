"""Product page scraping for the scoring prompt."""
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core.batch import run_in_batches
from core.errors import ScrapeError
from core.html_utils import (
    MAX_H2_COUNT,
    extract_body_text,
    extract_headings,
    extract_meta_description,
    extract_title,
    strip_noise,
)
from fetch.http_client import fetch_url

# Page scraping runs three at a time with a pause between batches
SCRAPE_CONCURRENCY = 3
SCRAPE_DELAY_SECONDS = 0.5

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageContent:
    url: str
    title: str = ""
    meta_description: str = ""
    h1_text: str = ""
    h2_text: str = ""
    body_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScrapeResult:
    success: bool
    url: str
    data: Optional[PageContent] = None
    error: Optional[str] = None


def parse_page(url: str, html: str) -> PageContent:
    meta_description = extract_meta_description(html)
    content = strip_noise(html)
    return PageContent(
        url=url,
        title=extract_title(content),
        meta_description=meta_description,
        h1_text=" | ".join(extract_headings(content, 1)),
        h2_text=" | ".join(extract_headings(content, 2)[:MAX_H2_COUNT]),
        body_text=extract_body_text(content),
    )


async def scrape_page(url: str) -> PageContent:
    """
    Fetch a product page and extract the text used for scoring.

    Raises:
        ScrapeError: on network failure or a non-2xx response
    """
    try:
        response = await fetch_url(url)
    except httpx.HTTPError as e:
        raise ScrapeError(url, str(e) or type(e).__name__) from e

    if not response.is_success:
        raise ScrapeError(url, f"{response.status_code} {response.reason_phrase}")

    return parse_page(url, response.text)


async def scrape_pages(
    urls: Sequence[str],
    concurrency: int = SCRAPE_CONCURRENCY,
    delay_seconds: float = SCRAPE_DELAY_SECONDS,
) -> List[ScrapeResult]:
    """Scrape pages in throttled batches, recording each outcome in input order."""
    outcomes = await run_in_batches(list(urls), scrape_page, batch_size=concurrency, delay_seconds=delay_seconds)
    results = [
        ScrapeResult(success=True, url=o.item, data=o.value)
        if o.success
        else ScrapeResult(success=False, url=o.item, error=o.error_message)
        for o in outcomes
    ]
    logger.info(f"Scraped {sum(r.success for r in results)}/{len(results)} pages")
    return results
