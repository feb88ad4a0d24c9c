import asyncio
import argparse
import json
import logging
import sys
from typing import Optional

from core.analyzer_registry import AnalyzerRegistry
from core.discovery import DEFAULT_FIND_LIMIT
from core.engine import Engine
from core.errors import InputValidationError, ScorerError
from core.savings import DEFAULT_DISCOUNT_PERCENT, DEFAULT_VULNERABILITY_THRESHOLD
from llm.anthropic_provider import AnthropicProvider
from modes.company import run_company
from modes.discover import run_bulk_discover, run_category_analysis, run_detect, run_discover, run_reverse_lookup
from modes.single import run_single
from modes.stack import run_stack
from rules.rules_loader import get_catalog


def _list_products():
    catalog = get_catalog()
    return [
        {
            "name": p.product_name,
            "category": p.category,
            "url": p.canonical_url,
            "rule_kinds": sorted({r.kind for r in p.rules}),
        }
        for p in catalog.products
    ]


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--output", type=str, help="Write the JSON report to this file instead of stdout")
    common.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: INFO)")
    common.add_argument("--model", type=str, help="LLM model (default: $SCORER_LLM_MODEL or the built-in default)")

    detection = argparse.ArgumentParser(add_help=False)
    detection.add_argument("--exclude", nargs="+", metavar="ANALYZER", help="Analyzers to skip during website detection (e.g., --exclude dns meta_tags)")

    savings = argparse.ArgumentParser(add_help=False)
    savings.add_argument("--discount", type=float, default=DEFAULT_DISCOUNT_PERCENT, help=f"Negotiation discount percent (default: {DEFAULT_DISCOUNT_PERCENT})")
    savings.add_argument("--threshold", type=int, default=DEFAULT_VULNERABILITY_THRESHOLD, help=f"Minimum vulnerability score for a product to count toward savings (default: {DEFAULT_VULNERABILITY_THRESHOLD})")

    parser = argparse.ArgumentParser(description="SaaS stack exposure scoring CLI")
    parser.add_argument("--list-products", action="store_true", help="List all fingerprinted products and exit")
    sub = parser.add_subparsers(dest="command")

    p = sub.add_parser("url", aliases=["single"], parents=[common, savings], help="Score a single product URL")
    p.add_argument("target", help="Product URL (e.g., https://www.zendesk.com)")

    p = sub.add_parser("stack", aliases=["csv"], parents=[common, savings], help="Score every product URL in a CSV file")
    p.add_argument("target", help="Path to CSV file")

    p = sub.add_parser("company", aliases=["org"], parents=[common, savings], help="Infer and score a company's SaaS stack")
    p.add_argument("target", help="Company name")

    p = sub.add_parser("discover", aliases=["scan"], parents=[common, savings, detection], help="Detect and infer a company's SaaS stack")
    p.add_argument("target", help="Company name, domain or URL")
    p.add_argument("--no-score", action="store_true", help="Skip vulnerability scoring of discovered products")

    p = sub.add_parser("bulk", aliases=["batch"], parents=[common, detection], help="Discover stacks for every company in a file")
    p.add_argument("target", help="Path to a file with one company per line (CSV first column)")

    p = sub.add_parser("find", aliases=["reverse", "lookup"], parents=[common], help="Find companies using a product")
    p.add_argument("target", help="Product name")
    p.add_argument("--industry", type=str, help="Restrict to an industry")
    p.add_argument("--size", type=str, help="Restrict to a company size (startup/smb/midmarket/enterprise)")
    p.add_argument("--limit", type=int, default=DEFAULT_FIND_LIMIT, help=f"Maximum companies to return (default: {DEFAULT_FIND_LIMIT})")

    p = sub.add_parser("category", aliases=["market"], parents=[common], help="Analyze a SaaS category")
    p.add_argument("target", help="Category name (e.g., 'customer support')")

    p = sub.add_parser("detect", parents=[common, detection], help="Fingerprint a website and DNS only (no LLM)")
    p.add_argument("target", help="Domain or URL")

    return parser


COMMAND_ALIASES = {
    "single": "url",
    "csv": "stack",
    "org": "company",
    "scan": "discover",
    "batch": "bulk",
    "reverse": "find",
    "lookup": "find",
    "market": "category",
}


def _build_engine(args) -> Optional[Engine]:
    """Create a detection engine honouring --exclude, or None for the default one."""
    exclude_set = set(getattr(args, "exclude", None) or [])
    if not exclude_set:
        return None

    available_analyzers = set(AnalyzerRegistry.get_all_names())
    invalid_excludes = exclude_set - available_analyzers
    if invalid_excludes:
        raise InputValidationError(
            f"Invalid analyzer names: {', '.join(sorted(invalid_excludes))} "
            f"(available: {', '.join(sorted(available_analyzers))})"
        )
    return Engine(exclude_analyzers=exclude_set)


async def run_command(command: str, args, llm=None):
    """Dispatch one CLI command to its workflow and return the JSON-ready result."""
    engine = _build_engine(args)
    if command == "detect":
        return await run_detect(args.target, engine)

    if llm is None:
        llm = AnthropicProvider(model=args.model)

    if command == "url":
        return await run_single(args.target, llm, discount_percent=args.discount, threshold=args.threshold)
    if command == "stack":
        return await run_stack(args.target, llm, discount_percent=args.discount, threshold=args.threshold)
    if command == "company":
        return await run_company(args.target, llm, discount_percent=args.discount, threshold=args.threshold)
    if command == "discover":
        return await run_discover(args.target, llm, engine, score=not args.no_score, discount_percent=args.discount, threshold=args.threshold)
    if command == "bulk":
        return await run_bulk_discover(args.target, llm, engine)
    if command == "find":
        return await run_reverse_lookup(args.target, llm, industry=args.industry, size=args.size, limit=args.limit)
    if command == "category":
        return await run_category_analysis(args.target, llm)
    raise ValueError(f"Unknown command: {command}")


def main():
    parser = _build_parser()
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, getattr(args, "log_level", "INFO")),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    if args.list_products:
        print(json.dumps(_list_products(), indent=2))
        return

    if not args.command:
        parser.error("a command is required unless using --list-products")

    command = COMMAND_ALIASES.get(args.command, args.command)
    logger.info(f"Running {command} for {args.target}")

    try:
        result = asyncio.run(run_command(command, args))
    except (ScorerError, ValueError, OSError) as e:
        logger.error(f"{command} failed: {e}")
        sys.exit(1)

    output = json.dumps(result, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        logger.info(f"Report saved to {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
