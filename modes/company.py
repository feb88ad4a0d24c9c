"""Company scan mode: infer a company's SaaS stack with the LLM and score it."""
import logging
from typing import Any, Dict

from core.discovery import infer_saas_stack
from core.errors import InputValidationError
from core.savings import DEFAULT_DISCOUNT_PERCENT, DEFAULT_VULNERABILITY_THRESHOLD, calculate_savings
from llm.client import LLMProvider
from modes.report import build_report
from modes.stack import scrape_and_score

logger = logging.getLogger(__name__)


async def run_company(
    company: str,
    llm: LLMProvider,
    discount_percent: float = DEFAULT_DISCOUNT_PERCENT,
    threshold: int = DEFAULT_VULNERABILITY_THRESHOLD,
) -> Dict[str, Any]:
    company = (company or "").strip()
    if not company:
        raise InputValidationError("A company name is required")

    logger.info(f"Researching SaaS stack for {company!r}")
    stack_info = await infer_saas_stack(company, llm)
    inferred = stack_info["inferred_stack"]
    if not inferred:
        raise InputValidationError(f"Could not infer any SaaS products for {company!r}")

    urls = [p.url for p in inferred if p.url and p.url.startswith("http")]
    if not urls:
        raise InputValidationError("No valid product URLs found in inferred stack")

    logger.info(f"Found {len(inferred)} likely products, {len(urls)} with URLs")
    results = await scrape_and_score(urls, llm)
    savings = calculate_savings(results, discount_percent=discount_percent, threshold=threshold)

    return build_report(results, savings, {
        "mode": "company",
        "company": company,
        "stack_notes": stack_info["notes"],
        "inferred_stack": [p.to_dict() for p in inferred],
    })
