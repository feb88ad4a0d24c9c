"""
Utility functions to validate the fingerprint catalog for duplications and inconsistencies.
"""

import os
import re
from collections import defaultdict
from typing import Any, Dict, List

import yaml

from models.technology import RULE_KINDS
from rules.rules_loader import RULES_DIR, load_categories


def load_raw_rules(rules_dir: str = RULES_DIR) -> List[Dict[str, Any]]:
    """Load fingerprint entries as plain dicts, without the loader's filtering."""
    filepath = os.path.join(rules_dir, "fingerprints.yaml")
    if not os.path.exists(filepath):
        return []
    with open(filepath, 'r') as f:
        rules = yaml.safe_load(f)
    return [rule for rule in rules or [] if isinstance(rule, dict)]


def _evidence(rule: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [ev for ev in rule.get('evidence') or [] if isinstance(ev, dict)]


def detect_duplicate_names(rules: List[Dict[str, Any]]) -> Dict[str, int]:
    """Product names (case-insensitive) defined more than once, with their counts."""
    counts = defaultdict(int)
    display = {}
    for rule in rules:
        name = str(rule.get('name', 'Unknown'))
        counts[name.lower()] += 1
        display.setdefault(name.lower(), name)
    return {display[key]: count for key, count in counts.items() if count > 1}


def detect_unknown_kinds(rules: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Evidence types outside the supported rule kinds, per product."""
    problems = defaultdict(list)
    for rule in rules:
        for ev in _evidence(rule):
            kind = ev.get('type')
            if kind not in RULE_KINDS:
                problems[rule.get('name', 'Unknown')].append(str(kind))
    return dict(problems)


def detect_invalid_patterns(rules: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """Regex patterns that fail to compile, per product. 'global' names are always literal."""
    problems = defaultdict(list)
    for rule in rules:
        for ev in _evidence(rule):
            pattern = ev.get('pattern')
            if not pattern:
                problems[rule.get('name', 'Unknown')].append(f"{ev.get('type')}: missing pattern")
                continue
            if ev.get('type') == 'global':
                continue
            try:
                re.compile(str(pattern))
            except re.error as e:
                problems[rule.get('name', 'Unknown')].append(f"{pattern}: {e}")
    return dict(problems)


def detect_missing_metadata(rules: List[Dict[str, Any]], categories: Dict[str, str]) -> Dict[str, List[str]]:
    """Products without a category listing or a canonical url."""
    missing = {'category': [], 'url': []}
    for rule in rules:
        name = rule.get('name', 'Unknown')
        if name not in categories:
            missing['category'].append(name)
        if not rule.get('url'):
            missing['url'].append(name)
    return missing


def detect_pattern_overlaps(rules: List[Dict[str, Any]]) -> Dict[str, List[str]]:
    """
    Detect patterns used by multiple products.

    Returns:
        Dictionary with "kind: pattern" keys and list of products as values
    """
    patterns_map = defaultdict(list)
    for rule in rules:
        for ev in _evidence(rule):
            if ev.get('pattern'):
                patterns_map[f"{ev.get('type')}: {ev.get('pattern')}"].append(rule.get('name', 'Unknown'))

    return {pattern: products for pattern, products in patterns_map.items() if len(products) > 1}


def validate_catalog(rules_dir: str = RULES_DIR) -> Dict[str, Any]:
    """Run every check against a rules directory."""
    rules = load_raw_rules(rules_dir)
    categories = load_categories(rules_dir)
    return {
        'total_products': len(rules),
        'duplicate_names': detect_duplicate_names(rules),
        'unknown_kinds': detect_unknown_kinds(rules),
        'invalid_patterns': detect_invalid_patterns(rules),
        'missing': detect_missing_metadata(rules, categories),
        'pattern_overlaps': detect_pattern_overlaps(rules),
    }


def has_errors(report: Dict[str, Any]) -> bool:
    """Duplicates, unknown kinds and invalid patterns are errors; the rest are warnings."""
    return bool(report['duplicate_names'] or report['unknown_kinds'] or report['invalid_patterns'])


def print_validation_report(report: Dict[str, Any], verbose: bool = True) -> None:
    print("\n" + "="*70)
    print("FINGERPRINT CATALOG VALIDATION REPORT")
    print("="*70)
    print(f"\nTotal Products: {report['total_products']}")

    if report['duplicate_names']:
        print(f"\nDUPLICATE PRODUCTS: {len(report['duplicate_names'])}")
        for name, count in sorted(report['duplicate_names'].items()):
            print(f"  - {name} (defined {count} times)")
    else:
        print("\nNo duplicate products")

    for title, key in (("UNKNOWN RULE KINDS", 'unknown_kinds'), ("INVALID PATTERNS", 'invalid_patterns')):
        if report[key]:
            print(f"\n{title}: {len(report[key])} products")
            for name, items in sorted(report[key].items()):
                print(f"  - {name}: {', '.join(items)}")
        else:
            print(f"\nNo {title.lower()}")

    for field_name, names in report['missing'].items():
        if names:
            print(f"\nMissing {field_name}: {', '.join(names)}")

    if report['pattern_overlaps']:
        print(f"\nPATTERN OVERLAPS: {len(report['pattern_overlaps'])}")
        if verbose:
            for pattern, products in sorted(report['pattern_overlaps'].items()):
                print(f"  '{pattern}' -> {', '.join(products)}")

    print("\n" + "="*70)


if __name__ == "__main__":
    import sys
    import argparse

    parser = argparse.ArgumentParser(description="Validate the fingerprint catalog for duplications and inconsistencies")
    parser.add_argument('--rules-dir', default=RULES_DIR, help='Directory holding fingerprints.yaml and categories.yaml')
    parser.add_argument(
        '--no-verbose',
        action='store_false',
        dest='verbose',
        default=True,
        help='Do not list pattern overlaps'
    )
    args = parser.parse_args()

    try:
        report = validate_catalog(args.rules_dir)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_validation_report(report, verbose=args.verbose)
    sys.exit(1 if has_errors(report) else 0)
