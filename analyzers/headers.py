from typing import List
import re
import logging
from core.context import ScanContext
from models.detection import DetectedSignal
from models.technology import ProductFingerprint
from core.analyzer_registry import AnalyzerRegistry


@AnalyzerRegistry.register("headers", {"header"})
class HeadersAnalyzer:
    def __init__(self, fingerprints: List[ProductFingerprint]):
        self.fingerprints = fingerprints

    def analyze(self, context: ScanContext) -> List[DetectedSignal]:
        logger = logging.getLogger(__name__)
        signals: List[DetectedSignal] = []

        for product in self.fingerprints:
            for rule in product.rules:
                if rule.kind != "header":
                    continue

                flags = re.IGNORECASE if rule.ignore_case else 0
                # Header rules match either the header name or its value
                for key, value in context.headers.items():
                    if re.search(rule.pattern, key, flags) or re.search(rule.pattern, value or "", flags):
                        logger.debug(f"HeadersAnalyzer matched {product.product_name} on header {key}")
                        signals.append(
                            DetectedSignal(
                                product_key=product.key,
                                evidence_kind="header",
                                evidence_text=f"header: {key}",
                                weight=rule.weight,
                            )
                        )
                        break

        logger.debug(f"HeadersAnalyzer: {len(signals)} signals")
        return signals
