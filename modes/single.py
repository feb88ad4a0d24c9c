"""Single URL scoring mode."""
import logging
from typing import Any, Dict
from urllib.parse import urlparse

from core.errors import InputValidationError
from core.savings import DEFAULT_DISCOUNT_PERCENT, DEFAULT_VULNERABILITY_THRESHOLD, calculate_savings
from core.scorer import score_product
from fetch.scraper import scrape_page
from llm.client import LLMProvider
from models.scoring import ScoreResult
from modes.report import build_report

logger = logging.getLogger(__name__)


def validate_url(url: str) -> str:
    """Require an absolute http(s) URL with a host."""
    url = (url or "").strip()
    if not url:
        raise InputValidationError("A product URL is required")
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise InputValidationError(f"Not a valid http(s) URL: {url!r}")
    return url


async def run_single(
    url: str,
    llm: LLMProvider,
    discount_percent: float = DEFAULT_DISCOUNT_PERCENT,
    threshold: int = DEFAULT_VULNERABILITY_THRESHOLD,
) -> Dict[str, Any]:
    """
    Scrape and score one product page.

    Scrape and LLM failures propagate to the caller.
    """
    url = validate_url(url)
    logger.info(f"Scoring {url}")

    page = await scrape_page(url)
    score = await score_product(page, llm)

    results = [ScoreResult(success=True, url=url, score=score)]
    savings = calculate_savings(results, discount_percent=discount_percent, threshold=threshold)
    return build_report(results, savings, {"mode": "single", "url": url})
