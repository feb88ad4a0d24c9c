from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional


def _as_int(value: Any) -> Optional[int]:
    """Best-effort integer coercion for LLM-produced numbers."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        value = value.replace(",", "").replace("$", "").strip()
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


@dataclass(frozen=True)
class Alternative:
    name: str
    type: Optional[str] = None # ai_native|open_source|cheaper_saas|build_internal
    url: Optional[str] = None
    estimated_savings: Optional[str] = None
    migration_difficulty: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class VendorLockIn:
    lock_in_type: str
    severity: Optional[str] = None
    escape_tactic: Optional[str] = None
    timeline: Optional[str] = None


@dataclass(frozen=True)
class VulnerabilityScore:
    """AI-replacement judgment for one product, as returned by the LLM."""
    product_name: str
    core_function: str = ""
    vulnerability_score: Optional[int] = None
    replacement_timeline: str = ""
    replacement_mechanism: str = ""
    moat_factors: List[str] = field(default_factory=list)
    negotiation_leverage: str = ""
    comparable_at_risk: List[str] = field(default_factory=list)
    estimated_annual_cost: Optional[int] = None
    alternatives: List[Alternative] = field(default_factory=list)
    vendor_lock_in: List[VendorLockIn] = field(default_factory=list)
    escape_plan: Optional[str] = None
    negotiation_script: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VulnerabilityScore":
        alternatives = [
            Alternative(
                name=a.get("name", ""),
                type=a.get("type"),
                url=a.get("url"),
                estimated_savings=a.get("estimated_savings"),
                migration_difficulty=a.get("migration_difficulty"),
                description=a.get("description"),
            )
            for a in _as_list(data.get("alternatives"))
            if isinstance(a, dict)
        ]
        lock_ins = [
            VendorLockIn(
                lock_in_type=item.get("lock_in_type", ""),
                severity=item.get("severity"),
                escape_tactic=item.get("escape_tactic"),
                timeline=item.get("timeline"),
            )
            for item in _as_list(data.get("vendor_lock_in"))
            if isinstance(item, dict)
        ]
        return cls(
            product_name=data.get("product_name", ""),
            core_function=data.get("core_function", ""),
            vulnerability_score=_as_int(data.get("vulnerability_score")),
            replacement_timeline=data.get("replacement_timeline", ""),
            replacement_mechanism=data.get("replacement_mechanism", ""),
            moat_factors=_as_list(data.get("moat_factors")),
            negotiation_leverage=data.get("negotiation_leverage", ""),
            comparable_at_risk=_as_list(data.get("comparable_at_risk")),
            estimated_annual_cost=_as_int(data.get("estimated_annual_cost")),
            alternatives=alternatives,
            vendor_lock_in=lock_ins,
            escape_plan=data.get("escape_plan"),
            negotiation_script=data.get("negotiation_script"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    """Outcome of scoring one product in a batch."""
    success: bool
    url: Optional[str] = None
    score: Optional[VulnerabilityScore] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"success": self.success, "url": self.url}
        if self.success and self.score is not None:
            data["score"] = self.score.to_dict()
        else:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class SavingsSummary:
    total_estimated_cost: int
    negotiable_product_count: int
    potential_savings: int
    discount_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
