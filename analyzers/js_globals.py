from typing import List
import re
from core.context import ScanContext
from models.detection import DetectedSignal
from models.technology import ProductFingerprint
from core.analyzer_registry import AnalyzerRegistry


def global_pattern(name: str) -> str:
    """Whole-identifier regex for a JS global (names may contain '$')."""
    return rf'(?<![\w$]){re.escape(name)}(?![\w$])'


@AnalyzerRegistry.register("js_globals", {"global"})
class JsGlobalsAnalyzer:
    """Look for product globals referenced in inline script blocks."""

    def __init__(self, fingerprints: List[ProductFingerprint]):
        self.fingerprints = fingerprints

    def analyze(self, context: ScanContext) -> List[DetectedSignal]:
        signals: List[DetectedSignal] = []

        for product in self.fingerprints:
            for rule in product.rules:
                if rule.kind != "global":
                    continue

                pattern = global_pattern(rule.pattern)
                flags = re.IGNORECASE if rule.ignore_case else 0
                for script in context.inline_scripts:
                    if script and re.search(pattern, script, flags):
                        signals.append(
                            DetectedSignal(
                                product_key=product.key,
                                evidence_kind="global",
                                evidence_text=f"global: {rule.pattern}",
                                weight=rule.weight,
                            )
                        )
                        break

        return signals
