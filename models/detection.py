from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional

CONFIDENCE_LEVELS = ("high", "medium", "low")
CONFIDENCE_RANK = {"high": 0, "medium": 1, "low": 2}

# Score thresholds for confidence buckets
HIGH_CONFIDENCE_SCORE = 60
MEDIUM_CONFIDENCE_SCORE = 30
MAX_SCORE = 100

WEBSITE_DETECTION = "website_detection"
DNS_DETECTION = "dns_detection"


def confidence_from_score(score: int) -> str:
    """Bucket a numeric fingerprint score into high/medium/low."""
    if score >= HIGH_CONFIDENCE_SCORE:
        return "high"
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return "medium"
    return "low"


def normalize_confidence(value: Any) -> str:
    """Coerce a self-reported confidence into a known level (unknown -> low)."""
    if isinstance(value, str):
        level = value.strip().lower()
        if level in CONFIDENCE_RANK:
            return level
    return "low"


def _text(value: Any) -> str:
    """Flatten a loosely typed LLM field to a string (None -> "", lists joined)."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "; ".join(_text(v) for v in value if _text(v))
    return str(value).strip()


@dataclass(frozen=True)
class DetectedSignal:
    """One piece of raw evidence for a candidate product."""
    product_key: str
    evidence_kind: str
    evidence_text: str
    weight: int


@dataclass(frozen=True)
class DetectedProduct:
    """A product found by fingerprinting a company's website and DNS."""
    name: str
    category: str
    confidence: str
    score: int
    evidence: List[str] = field(default_factory=list)
    url: Optional[str] = None
    source: str = WEBSITE_DETECTION

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class InferredProduct:
    """A product claimed by the LLM collaborator. Not independently verified."""
    name: str
    category: str = "Other"
    url: Optional[str] = None
    confidence: str = "low"
    source: str = ""
    evidence: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InferredProduct":
        return cls(
            name=_text(data.get("name")),
            category=_text(data.get("category")) or "Other",
            url=_text(data.get("url")) or None,
            confidence=normalize_confidence(data.get("confidence")),
            source=_text(data.get("source")),
            evidence=_text(data.get("evidence")) or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CombinedProduct:
    """Fused record in the discovered stack; keyed by lowercase name."""
    name: str
    category: str
    url: Optional[str]
    confidence: str
    sources: List[str] = field(default_factory=list)
    evidence: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.name.lower()

    def escalate(self, confidence: str) -> None:
        # Confidence only moves up
        if CONFIDENCE_RANK[confidence] < CONFIDENCE_RANK[self.confidence]:
            self.confidence = confidence

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
