"""Vulnerability scoring of scraped product pages through the LLM."""
import logging
from typing import Callable, List, Optional, Sequence

from core.batch import run_in_batches
from fetch.scraper import PageContent
from llm.client import LLMProvider
from llm.parsing import parse_json_response
from llm.prompts import score_product_prompt
from models.scoring import ScoreResult, VulnerabilityScore

SCORE_CONCURRENCY = 2
SCORE_MAX_TOKENS = 2048

logger = logging.getLogger(__name__)


async def score_product(page: PageContent, llm: LLMProvider) -> VulnerabilityScore:
    """
    Ask the LLM for an AI-replacement judgment on one product.

    Raises:
        LLMResponseError: if the reply is not a JSON object
    """
    reply = await llm.complete(score_product_prompt(page), max_tokens=SCORE_MAX_TOKENS)
    score = VulnerabilityScore.from_dict(parse_json_response(reply))
    logger.debug(f"Scored {page.url}: {score.product_name} -> {score.vulnerability_score}")
    return score


async def score_products(
    pages: Sequence[PageContent],
    llm: LLMProvider,
    concurrency: int = SCORE_CONCURRENCY,
    on_progress: Optional[Callable] = None,
) -> List[ScoreResult]:
    """Score pages in batches; a failed product becomes an unsuccessful result."""

    async def worker(page: PageContent) -> VulnerabilityScore:
        return await score_product(page, llm)

    outcomes = await run_in_batches(list(pages), worker, batch_size=concurrency, on_progress=on_progress)
    return [
        ScoreResult(success=True, url=o.item.url, score=o.value)
        if o.success
        else ScoreResult(success=False, url=o.item.url, error=o.error_message)
        for o in outcomes
    ]
