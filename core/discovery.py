"""Company stack discovery: website fingerprinting combined with LLM inference."""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import urlparse

from core.batch import run_in_batches
from core.engine import Engine
from core.fusion import fuse
from llm.client import LLMProvider
from llm.parsing import parse_json_response
from llm.prompts import (
    analyze_category_prompt,
    find_companies_prompt,
    infer_saas_stack_prompt,
    infer_stack_from_sources_prompt,
)
from models.detection import CombinedProduct, DetectedProduct, InferredProduct
from rules.rules_loader import FingerprintCatalog

DISCOVERY_CONCURRENCY = 2
DEFAULT_FIND_LIMIT = 25
COMPANY_INFER_MAX_TOKENS = 2048

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    company: str
    detected: List[DetectedProduct] = field(default_factory=list)
    inferred: List[InferredProduct] = field(default_factory=list)
    combined: List[CombinedProduct] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company": self.company,
            "detected": [p.to_dict() for p in self.detected],
            "inferred": [p.to_dict() for p in self.inferred],
            "combined": [p.to_dict() for p in self.combined],
            "metadata": self.metadata,
        }


@dataclass(frozen=True)
class CompanyDiscovery:
    """Outcome of discovering one company in a bulk run."""
    success: bool
    company: str
    data: Optional[DiscoveryResult] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {"success": True, "company": self.company, "data": self.data.to_dict()}
        return {"success": False, "company": self.company, "error": self.error}


def extract_domain(target: str) -> Optional[str]:
    """
    Derive a website domain from a company name, domain or URL.

    "https://www.acme.io/about" -> "www.acme.io", "www.acme.io" -> "acme.io",
    "Acme Corp" -> "acmecorp.com".
    """
    target = (target or "").strip()
    if target.startswith("http"):
        try:
            return urlparse(target).hostname or None
        except ValueError:
            return None

    if "." in target and " " not in target:
        return target[4:] if target.startswith("www.") else target

    cleaned = re.sub(r"[^a-z0-9]", "", target.lower())
    return f"{cleaned}.com" if cleaned else None


def _parse_products(items: Any) -> List[InferredProduct]:
    products = []
    for item in items if isinstance(items, list) else []:
        if not isinstance(item, dict):
            continue
        product = InferredProduct.from_dict(item)
        if product.name:
            products.append(product)
        else:
            logger.debug(f"Skipping inferred product without a name: {item!r}")
    return products


async def infer_stack_from_sources(company: str, llm: LLMProvider) -> Dict[str, Any]:
    """
    Ask the LLM which products a company uses, citing public sources.

    Returns:
        Dict with "company_info", "sources_checked" and "products"
        (InferredProduct list)
    """
    data = parse_json_response(await llm.complete(infer_stack_from_sources_prompt(company)))
    return {
        "company_info": data.get("company_info"),
        "sources_checked": data.get("sources_checked") or [],
        "products": _parse_products(data.get("products")),
    }


async def infer_saas_stack(company: str, llm: LLMProvider) -> Dict[str, Any]:
    """Lighter inference used by company mode; returns inferred_stack and notes."""
    reply = await llm.complete(infer_saas_stack_prompt(company), max_tokens=COMPANY_INFER_MAX_TOKENS)
    data = parse_json_response(reply)
    return {
        "company": data.get("company") or company,
        "inferred_stack": _parse_products(data.get("inferred_stack")),
        "notes": data.get("notes"),
    }


async def discover_company_stack(
    target: str,
    llm: LLMProvider,
    engine: Optional[Engine] = None,
    include_web_detection: bool = True,
    catalog: Optional[FingerprintCatalog] = None,
) -> DiscoveryResult:
    """
    Discover a company's SaaS stack.

    Website and DNS fingerprinting runs when a domain can be derived from
    the target; LLM inference always runs. Both are fused into one stack.

    Raises:
        LLMResponseError: if the inference reply cannot be parsed
    """
    result = DiscoveryResult(company=target)

    if include_web_detection:
        domain = extract_domain(target)
        if domain:
            engine = engine or Engine(catalog)
            logger.info(f"Scanning {domain} for SaaS fingerprints")
            result.detected = await engine.detect(domain)
            logger.info(f"Found {len(result.detected)} tools via website detection")

    logger.info(f"Inferring stack for {target} from public sources")
    inferred = await infer_stack_from_sources(target, llm)
    result.inferred = inferred["products"]
    result.metadata = {
        "company_info": inferred["company_info"],
        "sources_checked": inferred["sources_checked"],
    }

    result.combined = fuse(result.detected, result.inferred, catalog)
    return result


async def discover_bulk(
    companies: Sequence[str],
    llm: LLMProvider,
    engine: Optional[Engine] = None,
    concurrency: int = DISCOVERY_CONCURRENCY,
    on_progress: Optional[Callable[[int, int, str], Any]] = None,
    include_web_detection: bool = True,
) -> List[CompanyDiscovery]:
    """Discover many companies in batches; one failure does not stop the rest."""
    engine = engine or (Engine() if include_web_detection else None)

    async def worker(company: str) -> DiscoveryResult:
        return await discover_company_stack(company, llm, engine, include_web_detection=include_web_detection)

    outcomes = await run_in_batches(list(companies), worker, batch_size=concurrency, on_progress=on_progress)
    return [
        CompanyDiscovery(success=True, company=o.item, data=o.value)
        if o.success
        else CompanyDiscovery(success=False, company=o.item, error=o.error_message)
        for o in outcomes
    ]


async def find_companies_using(
    product: str,
    llm: LLMProvider,
    industry: Optional[str] = None,
    company_size: Optional[str] = None,
    limit: int = DEFAULT_FIND_LIMIT,
) -> Dict[str, Any]:
    """Reverse lookup: companies the LLM believes use a product."""
    data = parse_json_response(await llm.complete(find_companies_prompt(product, industry, company_size, limit)))
    companies = [c for c in data.get("companies") or [] if isinstance(c, dict)]
    data["companies"] = companies[:limit]
    data.setdefault("product", product)
    return data


async def analyze_category(category: str, llm: LLMProvider) -> Dict[str, Any]:
    data = parse_json_response(await llm.complete(analyze_category_prompt(category)))
    data.setdefault("category", category)
    return data
