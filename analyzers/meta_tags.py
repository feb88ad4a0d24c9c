from typing import List
import re
from core.context import ScanContext
from models.detection import DetectedSignal
from models.technology import ProductFingerprint
from core.analyzer_registry import AnalyzerRegistry

META_PREVIEW_LENGTH = 40


@AnalyzerRegistry.register("meta_tags", {"meta"})
class MetaTagsAnalyzer:
    """Analyze meta tag names and contents for CMS/widget signatures."""

    def __init__(self, fingerprints: List[ProductFingerprint]):
        self.fingerprints = fingerprints

    def analyze(self, context: ScanContext) -> List[DetectedSignal]:
        signals: List[DetectedSignal] = []

        for product in self.fingerprints:
            for rule in product.rules:
                if rule.kind != "meta":
                    continue

                flags = re.IGNORECASE if rule.ignore_case else 0
                for content in context.meta_content:
                    if content and re.search(rule.pattern, content, flags):
                        signals.append(
                            DetectedSignal(
                                product_key=product.key,
                                evidence_kind="meta",
                                evidence_text=f"meta: {content[:META_PREVIEW_LENGTH]}",
                                weight=rule.weight,
                            )
                        )
                        break

        return signals
