from typing import List
import re
from core.context import ScanContext
from models.detection import DetectedSignal
from models.technology import ProductFingerprint
from core.analyzer_registry import AnalyzerRegistry


@AnalyzerRegistry.register("dns", {"dns"})
class DnsAnalyzer:
    """Match TXT/MX/CNAME record text against product DNS patterns."""

    def __init__(self, fingerprints: List[ProductFingerprint]):
        self.fingerprints = fingerprints

    def analyze(self, context: ScanContext) -> List[DetectedSignal]:
        signals: List[DetectedSignal] = []
        if not context.dns_content.strip():
            return signals

        for product in self.fingerprints:
            for rule in product.rules:
                if rule.kind != "dns":
                    continue

                flags = re.IGNORECASE if rule.ignore_case else 0
                if re.search(rule.pattern, context.dns_content, flags):
                    signals.append(
                        DetectedSignal(
                            product_key=product.key,
                            evidence_kind="dns",
                            evidence_text="dns_record",
                            weight=rule.weight,
                        )
                    )
                    # A product counts at most one DNS match
                    break

        return signals
