"""Dynamic analyzer registration system."""
import logging
from typing import Dict, Type, List, Set
from models.technology import ProductFingerprint

logger = logging.getLogger(__name__)


class AnalyzerRegistry:
    """Registry for dynamically discovering and instantiating rule-kind analyzers."""

    _analyzers: Dict[str, Type] = {}
    _rule_kinds: Dict[str, Set[str]] = {}
    _order: List[str] = []  # Preserve registration order

    @classmethod
    def register(cls, name: str, rule_kinds: Set[str]):
        """Decorator to register an analyzer class.

        Args:
            name: Unique identifier for the analyzer (e.g., "scripts", "headers")
            rule_kinds: Fingerprint rule kinds this analyzer evaluates

        Example:
            @AnalyzerRegistry.register("headers", {"header"})
            class HeadersAnalyzer:
                def __init__(self, fingerprints: List[ProductFingerprint]):
                    self.fingerprints = fingerprints

                def analyze(self, context: ScanContext) -> List[DetectedSignal]:
                    ...
        """
        def decorator(analyzer_class: Type):
            if name in cls._analyzers:
                logger.warning(f"Analyzer '{name}' already registered, overwriting")
            else:
                cls._order.append(name)

            cls._analyzers[name] = analyzer_class
            cls._rule_kinds[name] = set(rule_kinds)

            logger.debug(f"Registered analyzer: {name} ({', '.join(sorted(rule_kinds))}) -> {analyzer_class.__name__}")
            return analyzer_class
        return decorator

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get names of all registered analyzers in registration order."""
        return cls._order.copy()

    @classmethod
    def instantiate_all(cls, fingerprints: List[ProductFingerprint], exclude: Set[str] = None) -> Dict[str, object]:
        """Instantiate registered analyzers, each with only the rules it evaluates.

        Args:
            fingerprints: The full product fingerprint catalog
            exclude: Set of analyzer names to exclude from instantiation

        Returns:
            Dictionary mapping analyzer name to instantiated analyzer object
        """
        exclude = exclude or set()
        instances = {}

        for name in cls._order:
            if name in exclude:
                logger.info(f"Skipping excluded analyzer: {name}")
                continue

            filtered = filter_by_rule_kinds(fingerprints, cls._rule_kinds[name])
            logger.debug(f"Filtered rules for {name}: {len(filtered)} products")
            instances[name] = cls._analyzers[name](filtered)

        return instances


def filter_by_rule_kinds(fingerprints: List[ProductFingerprint], allowed_kinds: Set[str]) -> List[ProductFingerprint]:
    """Helper to filter products by rule kinds.

    Args:
        fingerprints: List of all product fingerprints
        allowed_kinds: Set of rule kinds to keep (e.g., {"script", "iframe"})

    Returns:
        List of ProductFingerprint objects containing only matching rule kinds
    """
    filtered = []
    for product in fingerprints:
        matching_rules = [r for r in product.rules if r.kind in allowed_kinds]
        if matching_rules:
            filtered.append(
                ProductFingerprint(
                    product_name=product.product_name,
                    category=product.category,
                    canonical_url=product.canonical_url,
                    rules=matching_rules,
                )
            )
    return filtered
