"""Fingerprint matching: turn collected evidence into scored product detections.

Every registered analyzer evaluates the rules of one kind against the scan
context and emits DetectedSignal objects. Signals are summed per product,
the total is clamped to 100 and bucketed into a confidence level. Mail
providers recognised from MX hosts are reported directly with a fixed score.
"""
from typing import Dict, List, Optional, Set
import logging

from core.analyzer_registry import AnalyzerRegistry
from core.context import PageEvidence, ScanContext
from models.detection import (
    DetectedProduct,
    DetectedSignal,
    DNS_DETECTION,
    MAX_SCORE,
    WEBSITE_DETECTION,
    confidence_from_score,
)
from rules.rules_loader import FingerprintCatalog, get_catalog

# Import all analyzers to trigger @AnalyzerRegistry.register decorators
import analyzers.scripts
import analyzers.js_globals
import analyzers.headers
import analyzers.iframes
import analyzers.meta_tags
import analyzers.dns
from analyzers.mail_provider import MailProviderAnalyzer

# Score given to a product whose only evidence is a DNS record
DNS_ONLY_SCORE = 30

logger = logging.getLogger(__name__)


class FingerprintMatcher:
    def __init__(self, catalog: Optional[FingerprintCatalog] = None, exclude_analyzers: Set[str] = None):
        """Initialize the matcher from a fingerprint catalog.

        Args:
            catalog: Fingerprint catalog (defaults to the bundled rules)
            exclude_analyzers: Set of analyzer names to skip (e.g., {'dns'})
        """
        self.catalog = catalog or get_catalog()
        self.analyzers = AnalyzerRegistry.instantiate_all(self.catalog.products, exclude=exclude_analyzers)
        self.mail_analyzer = MailProviderAnalyzer(self.catalog.mail_providers, self.catalog.categories)
        logger.debug(f"Initialized {len(self.analyzers)} analyzers for {len(self.catalog.products)} products")

    def match(self, context: ScanContext) -> List[DetectedProduct]:
        signals: List[DetectedSignal] = []
        for name, analyzer in self.analyzers.items():
            found = analyzer.analyze(context)
            logger.debug(f"{name} analyzer produced {len(found)} signals")
            signals.extend(found)

        detected = self._score_signals(signals)
        for product in self.mail_analyzer.analyze(context):
            detected[product.name.lower()] = product

        return sorted(detected.values(), key=lambda p: (-p.score, p.name))

    def _score_signals(self, signals: List[DetectedSignal]) -> Dict[str, DetectedProduct]:
        """Sum signal weights per product and build one detection per product."""
        grouped: Dict[str, List[DetectedSignal]] = {}
        for signal in signals:
            grouped.setdefault(signal.product_key, []).append(signal)

        detected: Dict[str, DetectedProduct] = {}
        # Catalog order keeps evidence and output stable
        for product in self.catalog.products:
            product_signals = grouped.get(product.key)
            if not product_signals:
                continue

            dns_only = all(s.evidence_kind == "dns" for s in product_signals)
            if dns_only:
                raw_score = DNS_ONLY_SCORE
            else:
                raw_score = sum(s.weight for s in product_signals)

            score = min(raw_score, MAX_SCORE)
            if score <= 0:
                continue

            detected[product.key] = DetectedProduct(
                name=product.product_name,
                category=product.category,
                confidence=confidence_from_score(score),
                score=score,
                evidence=[s.evidence_text for s in product_signals],
                url=product.canonical_url,
                source=DNS_DETECTION if dns_only else WEBSITE_DETECTION,
            )
            logger.debug(f"Detected {product.product_name}: score={score} ({len(product_signals)} signals)")

        return detected


_default_matcher: Optional[FingerprintMatcher] = None


def _get_default_matcher() -> FingerprintMatcher:
    global _default_matcher
    if _default_matcher is None:
        _default_matcher = FingerprintMatcher()
    return _default_matcher


def match_fingerprints(
    page_evidence: Optional[PageEvidence],
    headers: Optional[Dict[str, str]] = None,
    dns_content: str = "",
    mx_content: str = "",
    matcher: Optional[FingerprintMatcher] = None,
) -> List[DetectedProduct]:
    """
    Evaluate the fingerprint catalog against already-collected evidence.

    Args:
        page_evidence: Script, inline script, iframe and meta evidence lists
        headers: Response headers (key -> value)
        dns_content: TXT + MX + CNAME record text
        mx_content: MX exchange hosts, used for mail-provider detection
        matcher: Matcher to use (defaults to one built from the bundled catalog)

    Returns:
        Detected products ordered by score (highest first); empty when
        no evidence matched
    """
    context = ScanContext(
        page=page_evidence or PageEvidence(),
        headers={k.lower(): v for k, v in (headers or {}).items()},
        dns_content=dns_content or "",
        mx_content=mx_content or "",
    )
    return (matcher or _get_default_matcher()).match(context)
