"""Stack fusion: merge fingerprint detections with LLM-inferred products.

Products are keyed by their lowercased name (exact match only). When a key
inferred by the LLM is already present, the product has been seen by two
methods and its confidence is raised to "high" whatever either method
reported. The result is ordered by confidence, then name, so that the
output does not depend on the order claims arrived in.
"""
from typing import Dict, List, Optional, Sequence
import logging

from models.detection import (
    CONFIDENCE_RANK,
    WEBSITE_DETECTION,
    CombinedProduct,
    DetectedProduct,
    InferredProduct,
    normalize_confidence,
)
from rules.rules_loader import FingerprintCatalog, get_catalog

# Recorded when an inferred product carries no source description
DEFAULT_INFERRED_SOURCE = "ai_inference"

logger = logging.getLogger(__name__)


def sort_stack(products: Sequence[CombinedProduct]) -> List[CombinedProduct]:
    return sorted(
        products,
        key=lambda p: (CONFIDENCE_RANK.get(p.confidence, len(CONFIDENCE_RANK)), p.name.casefold(), p.name),
    )


def fuse(
    detected: Sequence[DetectedProduct],
    inferred: Sequence[InferredProduct],
    catalog: Optional[FingerprintCatalog] = None,
) -> List[CombinedProduct]:
    """
    Merge detected and inferred products into one discovered stack.

    Args:
        detected: Products found by fingerprinting
        inferred: Products claimed by the LLM collaborator
        catalog: Used for url fallback of inferred products

    Returns:
        Deduplicated CombinedProduct list sorted by confidence then name
    """
    catalog = catalog or get_catalog()
    combined: Dict[str, CombinedProduct] = {}

    for product in detected:
        combined[product.name.lower()] = CombinedProduct(
            name=product.name,
            category=product.category,
            url=product.url,
            confidence=product.confidence,
            sources=[WEBSITE_DETECTION],
            evidence=list(product.evidence),
        )

    for product in inferred:
        key = product.name.lower()
        source = product.source or DEFAULT_INFERRED_SOURCE
        existing = combined.get(key)

        if existing:
            # Corroborated by a second method
            existing.escalate("high")
            existing.sources.append(source)
            if product.evidence:
                existing.evidence.append(product.evidence)
            logger.debug(f"Corroborated {existing.name} via {source}")
        else:
            combined[key] = CombinedProduct(
                name=product.name,
                category=product.category,
                url=product.url or catalog.url_for(product.name),
                confidence=normalize_confidence(product.confidence),
                sources=[source],
                evidence=[product.evidence] if product.evidence else [],
            )

    return sort_stack(list(combined.values()))
