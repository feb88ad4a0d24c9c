"""JSON report assembly shared by the scoring workflows."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from models.scoring import SavingsSummary, ScoreResult

# Products at or above this score are counted as highly vulnerable
HIGH_VULNERABILITY_SCORE = 7


def _vulnerability(result: ScoreResult) -> int:
    value = result.score.vulnerability_score if result.score else None
    return value if value is not None else -1


def build_report(
    results: Sequence[ScoreResult],
    savings: SavingsSummary,
    metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the exported report for a set of scored products.

    Successful products are listed most vulnerable first; failures are
    listed separately with their error message.
    """
    successful = sorted((r for r in results if r.success and r.score), key=_vulnerability, reverse=True)
    failed = [r for r in results if not r.success]

    report: Dict[str, Any] = {"generated_at": datetime.now(timezone.utc).isoformat()}
    report.update(metadata or {})
    report["summary"] = {
        "total_scanned": len(results),
        "successful": len(successful),
        "failed": len(failed),
        "high_vulnerability_count": sum(1 for r in successful if _vulnerability(r) >= HIGH_VULNERABILITY_SCORE),
        **savings.to_dict(),
    }
    report["products"] = [r.score.to_dict() for r in successful]
    report["errors"] = [{"url": r.url, "error": r.error} for r in failed]
    return report


def product_frequency(stacks: Sequence[Sequence[Any]]) -> List[Dict[str, Any]]:
    """
    Count how many companies use each product across discovered stacks.

    Args:
        stacks: One list of CombinedProduct per company

    Returns:
        [{"name", "category", "companies"}] ordered by count, then name
    """
    counts: Dict[str, Dict[str, Any]] = {}
    for stack in stacks:
        seen = set()
        for product in stack:
            key = product.name.lower()
            if key in seen:
                continue
            seen.add(key)
            entry = counts.setdefault(key, {"name": product.name, "category": product.category, "companies": 0})
            entry["companies"] += 1
    return sorted(counts.values(), key=lambda e: (-e["companies"], e["name"].casefold()))
