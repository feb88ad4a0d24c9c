"""Discovery modes: find SaaS stacks, reverse lookups and category analysis."""
import logging
from typing import Any, Dict, List, Optional

from core.discovery import (
    DEFAULT_FIND_LIMIT,
    analyze_category,
    discover_bulk,
    discover_company_stack,
    extract_domain,
    find_companies_using,
)
from core.engine import Engine
from core.errors import InputValidationError
from core.savings import DEFAULT_DISCOUNT_PERCENT, DEFAULT_VULNERABILITY_THRESHOLD, calculate_savings
from llm.client import LLMProvider
from modes.report import product_frequency
from modes.stack import scrape_and_score

# Cap on products scored per discovery to stay under LLM rate limits
MAX_SCORED_PRODUCTS = 15

logger = logging.getLogger(__name__)


def _require(value: str, what: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InputValidationError(f"A {what} is required")
    return value


async def run_detect(target: str, engine: Optional[Engine] = None) -> Dict[str, Any]:
    """Fingerprint a website and its DNS without involving the LLM."""
    target = _require(target, "company domain or URL")
    domain = extract_domain(target)
    if not domain:
        raise InputValidationError(f"Cannot derive a domain from {target!r}")

    detected = await (engine or Engine()).detect(domain)
    return {"mode": "detect", "domain": domain, "detected": [p.to_dict() for p in detected]}


async def run_discover(
    target: str,
    llm: LLMProvider,
    engine: Optional[Engine] = None,
    score: bool = True,
    discount_percent: float = DEFAULT_DISCOUNT_PERCENT,
    threshold: int = DEFAULT_VULNERABILITY_THRESHOLD,
) -> Dict[str, Any]:
    target = _require(target, "company name or domain")
    logger.info(f"Discovering SaaS stack for {target!r}")

    discovery = await discover_company_stack(target, llm, engine)
    logger.info(
        f"Found {len(discovery.combined)} products total "
        f"({len(discovery.detected)} detected, {len(discovery.inferred)} inferred)"
    )

    scores = None
    savings = None
    if score:
        urls = [p.url for p in discovery.combined if p.url][:MAX_SCORED_PRODUCTS]
        if urls:
            logger.info(f"Scoring {len(urls)} products")
            results = await scrape_and_score(urls, llm)
            scores = [r.to_dict() for r in results]
            savings = calculate_savings(results, discount_percent=discount_percent, threshold=threshold).to_dict()

    return {
        "mode": "discover",
        "company": target,
        "discovery": discovery.to_dict(),
        "scores": scores,
        "savings": savings,
    }


def parse_companies_text(text: str) -> List[str]:
    """First CSV column of each line; header rows starting with "company" are skipped."""
    companies = []
    for line in text.splitlines():
        name = line.split(",")[0].strip()
        if name and not name.lower().startswith("company"):
            companies.append(name)
    return companies


async def run_bulk_discover(
    input_file: str,
    llm: LLMProvider,
    engine: Optional[Engine] = None,
) -> Dict[str, Any]:
    with open(input_file, "r", encoding="utf-8") as f:
        companies = parse_companies_text(f.read())
    if not companies:
        raise InputValidationError(f"No companies found in {input_file}")

    logger.info(f"Bulk discovering stacks for {len(companies)} companies")

    def progress(done: int, total: int, company: str) -> None:
        logger.info(f"[{done}/{total}] {company}")

    results = await discover_bulk(companies, llm, engine, on_progress=progress)
    successful = [r for r in results if r.success]
    total_products = sum(len(r.data.combined) for r in successful)
    logger.info(f"Discovered {total_products} products across {len(successful)} companies")

    return {
        "mode": "bulk",
        "source": input_file,
        "companies": [r.to_dict() for r in results],
        "product_frequency": product_frequency([r.data.combined for r in successful]),
    }


async def run_reverse_lookup(
    product: str,
    llm: LLMProvider,
    industry: Optional[str] = None,
    size: Optional[str] = None,
    limit: int = DEFAULT_FIND_LIMIT,
) -> Dict[str, Any]:
    product = _require(product, "product name")
    logger.info(f"Finding companies using {product!r}")
    result = await find_companies_using(product, llm, industry=industry, company_size=size, limit=limit)
    logger.info(f"Found {len(result['companies'])} companies")
    return result


async def run_category_analysis(category: str, llm: LLMProvider) -> Dict[str, Any]:
    category = _require(category, "category")
    logger.info(f"Analyzing {category!r} category for AI vulnerability")
    return await analyze_category(category, llm)
