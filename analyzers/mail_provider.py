from typing import List
import re
from core.context import ScanContext
from models.detection import DetectedProduct, DNS_DETECTION, confidence_from_score
from models.technology import MailProvider


class MailProviderAnalyzer:
    """Recognise hosted mail suites from MX hosts.

    This is not a weighted rule: an MX host containing a provider token is
    conclusive on its own, so the product is emitted directly with the
    provider's fixed score instead of going through the fingerprint scorer.
    """

    def __init__(self, providers: List[MailProvider], categories: dict = None):
        self.providers = providers
        self.categories = categories or {}

    def analyze(self, context: ScanContext) -> List[DetectedProduct]:
        products: List[DetectedProduct] = []
        if not context.mx_content.strip():
            return products

        for provider in self.providers:
            if re.search(provider.pattern, context.mx_content, re.IGNORECASE):
                products.append(
                    DetectedProduct(
                        name=provider.product_name,
                        category=self.categories.get(provider.product_name, "Other"),
                        confidence=confidence_from_score(provider.score),
                        score=provider.score,
                        evidence=["mx_record"],
                        url=provider.canonical_url,
                        source=DNS_DETECTION,
                    )
                )
        return products
