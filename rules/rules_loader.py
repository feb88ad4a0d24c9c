import os
import logging
import yaml
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Dict, Optional
from models.technology import (
    FingerprintRule,
    ProductFingerprint,
    MailProvider,
    RULE_KINDS,
    DEFAULT_RULE_WEIGHTS,
)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_CATEGORY = "Other"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FingerprintCatalog:
    """Read-only bundle of everything the matcher needs."""
    products: List[ProductFingerprint] = field(default_factory=list)
    mail_providers: List[MailProvider] = field(default_factory=list)
    categories: Dict[str, str] = field(default_factory=dict)
    product_urls: Dict[str, str] = field(default_factory=dict)

    def category_for(self, product_name: str) -> str:
        return self.categories.get(product_name, DEFAULT_CATEGORY)

    def url_for(self, product_name: str) -> Optional[str]:
        return self.product_urls.get(product_name)


def _read_yaml(path: str):
    if not os.path.exists(path):
        logger.warning(f"Rules file not found: {path}")
        return None
    with open(path, "r") as f:
        return yaml.safe_load(f)


def load_categories(rules_dir: str = RULES_DIR) -> Dict[str, str]:
    """
    Loads the product -> category lookup. The first category listing a
    product wins.
    """
    data = _read_yaml(os.path.join(rules_dir, "categories.yaml")) or {}
    categories: Dict[str, str] = {}
    for category, products in data.items():
        for product in products or []:
            categories.setdefault(product, category)
    return categories


def load_rules(rules_dir: str = RULES_DIR, categories: Optional[Dict[str, str]] = None) -> List[ProductFingerprint]:
    """
    Loads product fingerprints from fingerprints.yaml.
    """
    if categories is None:
        categories = load_categories(rules_dir)

    rules_data = _read_yaml(os.path.join(rules_dir, "fingerprints.yaml")) or []
    fingerprints: List[ProductFingerprint] = []
    for rule_data in rules_data:
        # Basic validation
        if not all(k in rule_data for k in ["name", "evidence"]):
            logger.warning(f"Skipping invalid fingerprint: {rule_data}")
            continue

        rules = []
        for evidence_item in rule_data["evidence"]:
            kind = evidence_item.get("type")
            pattern = evidence_item.get("pattern")
            if kind not in RULE_KINDS or not pattern:
                logger.warning(f"Skipping invalid rule for {rule_data['name']}: {evidence_item}")
                continue
            rules.append(
                FingerprintRule(
                    kind=kind,
                    pattern=str(pattern),
                    weight=evidence_item.get("weight", DEFAULT_RULE_WEIGHTS[kind]),
                    ignore_case=bool(evidence_item.get("ignore_case", False)),
                )
            )

        fingerprints.append(
            ProductFingerprint(
                product_name=rule_data["name"],
                category=categories.get(rule_data["name"], DEFAULT_CATEGORY),
                canonical_url=rule_data.get("url"),
                rules=rules,
            )
        )
    return fingerprints


def load_mail_providers(rules_dir: str = RULES_DIR) -> List[MailProvider]:
    data = _read_yaml(os.path.join(rules_dir, "mail_providers.yaml")) or []
    return [
        MailProvider(
            product_name=item["name"],
            pattern=item["pattern"],
            canonical_url=item.get("url"),
            score=item.get("score", 80),
        )
        for item in data
        if item.get("name") and item.get("pattern")
    ]


def load_catalog(rules_dir: str = RULES_DIR) -> FingerprintCatalog:
    categories = load_categories(rules_dir)
    products = load_rules(rules_dir, categories)
    mail_providers = load_mail_providers(rules_dir)

    product_urls: Dict[str, str] = {}
    for entry in list(products) + list(mail_providers):
        name = entry.product_name
        if entry.canonical_url and name not in product_urls:
            product_urls[name] = entry.canonical_url

    logger.debug(f"Loaded {len(products)} fingerprints, {len(mail_providers)} mail providers")
    return FingerprintCatalog(
        products=products,
        mail_providers=mail_providers,
        categories=categories,
        product_urls=product_urls,
    )


@lru_cache(maxsize=1)
def get_catalog() -> FingerprintCatalog:
    """Process-wide catalog, loaded once from the bundled rules directory."""
    return load_catalog()


def get_product_category(product_name: str) -> str:
    return get_catalog().category_for(product_name)


# Example usage (for testing)
if __name__ == "__main__":
    catalog = load_catalog()
    print(f"Loaded {len(catalog.products)} products.")
    for product in catalog.products:
        print(f"  - {product.product_name} ({product.category})")
        for rule in product.rules:
            print(f"    - Rule: kind={rule.kind}, pattern={rule.pattern}, weight={rule.weight}")
