from dataclasses import dataclass, field
from typing import List, Optional

RULE_KINDS = ("script", "global", "header", "iframe", "meta", "dns")

# Weight added to a product's score when a rule of this kind matches
DEFAULT_RULE_WEIGHTS = {
    "script": 40,
    "global": 30,
    "header": 25,
    "iframe": 35,
    "meta": 20,
    "dns": 20,
}

@dataclass(frozen=True)
class FingerprintRule:
    """Defines a rule for detecting a product."""
    kind: str # e.g., 'script', 'global', 'dns'
    pattern: str # Regex (or global variable name for 'global' rules)
    weight: int = 0
    ignore_case: bool = False

@dataclass(frozen=True)
class ProductFingerprint:
    """Represents a product and its detection rules."""
    product_name: str
    category: str
    canonical_url: Optional[str] = None
    rules: List[FingerprintRule] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.product_name.lower()

@dataclass(frozen=True)
class MailProvider:
    """An MX-record token match that identifies a hosted mail suite."""
    product_name: str
    pattern: str
    canonical_url: Optional[str] = None
    score: int = 80
