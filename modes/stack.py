"""Stack scan mode: score every product listed in a CSV file."""
import csv
import io
import logging
from typing import Any, Dict, List, Sequence

from core.errors import InputValidationError
from core.savings import DEFAULT_DISCOUNT_PERCENT, DEFAULT_VULNERABILITY_THRESHOLD, calculate_savings
from core.scorer import score_products
from fetch.scraper import scrape_pages
from llm.client import LLMProvider
from models.scoring import ScoreResult
from modes.report import build_report

URL_COLUMNS = ("url", "product_url", "link")

logger = logging.getLogger(__name__)


def parse_csv_text(text: str) -> List[str]:
    """
    Extract product URLs from CSV text.

    A first row mentioning "url" or "product" is a header; the URL column is
    the one named url, product_url or link, else the first column. Without a
    header every row's first column is used. Only http(s) values are kept.
    """
    rows = [row for row in csv.reader(io.StringIO(text.strip())) if row]
    if not rows:
        raise InputValidationError("CSV file is empty")

    header_line = ",".join(rows[0]).lower()
    column = 0
    if "url" in header_line or "product" in header_line:
        headers = [h.strip().lower() for h in rows[0]]
        column = next((i for i, h in enumerate(headers) if h in URL_COLUMNS), 0)
        rows = rows[1:]

    urls = [row[column].strip() for row in rows if len(row) > column]
    return [u for u in urls if u.startswith(("http://", "https://"))]


def parse_csv(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return parse_csv_text(f.read())


async def scrape_and_score(urls: Sequence[str], llm: LLMProvider) -> List[ScoreResult]:
    """
    Scrape product pages and score the ones that loaded.

    Scrape failures become unsuccessful results so that every URL is
    accounted for. Results follow the order of urls.
    """
    scrape_results = await scrape_pages(urls)
    pages = [r.data for r in scrape_results if r.success]
    logger.info(f"Scoring {len(pages)} products")

    scored = iter(await score_products(pages, llm))
    return [
        next(scored) if r.success else ScoreResult(success=False, url=r.url, error=f"Scrape failed: {r.error}")
        for r in scrape_results
    ]


async def run_stack(
    csv_path: str,
    llm: LLMProvider,
    discount_percent: float = DEFAULT_DISCOUNT_PERCENT,
    threshold: int = DEFAULT_VULNERABILITY_THRESHOLD,
) -> Dict[str, Any]:
    logger.info(f"Loading stack from {csv_path}")
    urls = parse_csv(csv_path)
    if not urls:
        raise InputValidationError(f"No valid URLs found in {csv_path}")

    logger.info(f"Found {len(urls)} products to score")
    results = await scrape_and_score(urls, llm)
    savings = calculate_savings(results, discount_percent=discount_percent, threshold=threshold)
    return build_report(results, savings, {"mode": "stack", "source": csv_path})
