from typing import List
import re
import logging
from core.context import ScanContext
from models.detection import DetectedSignal
from models.technology import ProductFingerprint
from core.analyzer_registry import AnalyzerRegistry

# Evidence previews are truncated to keep reports small
SCRIPT_PREVIEW_LENGTH = 60


@AnalyzerRegistry.register("scripts", {"script"})
class ScriptsAnalyzer:
    """Match script src URLs against product script patterns."""

    def __init__(self, fingerprints: List[ProductFingerprint]):
        self.fingerprints = fingerprints

    def analyze(self, context: ScanContext) -> List[DetectedSignal]:
        logger = logging.getLogger(__name__)
        signals: List[DetectedSignal] = []

        for product in self.fingerprints:
            for rule in product.rules:
                if rule.kind != "script":
                    continue

                flags = re.IGNORECASE if rule.ignore_case else 0
                for src in context.scripts:
                    if src and re.search(rule.pattern, src, flags):
                        logger.debug(f"ScriptsAnalyzer matched {product.product_name} on {src}")
                        signals.append(
                            DetectedSignal(
                                product_key=product.key,
                                evidence_kind="script",
                                evidence_text=f"script: {src[:SCRIPT_PREVIEW_LENGTH]}",
                                weight=rule.weight,
                            )
                        )
                        # One hit per rule
                        break

        return signals
