from typing import List
import re
from core.context import ScanContext
from models.detection import DetectedSignal
from models.technology import ProductFingerprint
from core.analyzer_registry import AnalyzerRegistry

IFRAME_PREVIEW_LENGTH = 60


@AnalyzerRegistry.register("iframes", {"iframe"})
class IframesAnalyzer:
    """Match embedded iframe sources (job boards, schedulers, video players)."""

    def __init__(self, fingerprints: List[ProductFingerprint]):
        self.fingerprints = fingerprints

    def analyze(self, context: ScanContext) -> List[DetectedSignal]:
        signals: List[DetectedSignal] = []

        for product in self.fingerprints:
            for rule in product.rules:
                if rule.kind != "iframe":
                    continue

                flags = re.IGNORECASE if rule.ignore_case else 0
                for src in context.iframes:
                    if src and re.search(rule.pattern, src, flags):
                        signals.append(
                            DetectedSignal(
                                product_key=product.key,
                                evidence_kind="iframe",
                                evidence_text=f"iframe: {src[:IFRAME_PREVIEW_LENGTH]}",
                                weight=rule.weight,
                            )
                        )
                        break

        return signals
