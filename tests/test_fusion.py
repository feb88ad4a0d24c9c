import pytest

from core.fusion import DEFAULT_INFERRED_SOURCE, fuse
from models.detection import CONFIDENCE_RANK, DetectedProduct, InferredProduct
from rules.rules_loader import FingerprintCatalog


@pytest.fixture
def catalog():
    return FingerprintCatalog(product_urls={"Stripe": "https://stripe.com", "Slack": "https://slack.com"})


def _detected(name, confidence="medium", score=40, evidence=None, url=None, category="Payments"):
    return DetectedProduct(
        name=name,
        category=category,
        confidence=confidence,
        score=score,
        evidence=evidence if evidence is not None else [f"script: {name.lower()}"],
        url=url,
    )


def test_corroborated_product_becomes_high(catalog):
    detected = [_detected("Stripe", "medium", 40, ["script: js.stripe.com/v3"], "https://stripe.com")]
    inferred = [InferredProduct(name="stripe", category="Payments", confidence="low", source="job posting", evidence="Stripe API")]

    stack = fuse(detected, inferred, catalog)

    assert len(stack) == 1
    product = stack[0]
    assert product.name == "Stripe"
    assert product.confidence == "high"
    assert product.sources == ["website_detection", "job posting"]
    assert product.evidence == ["script: js.stripe.com/v3", "Stripe API"]
    assert product.url == "https://stripe.com"


def test_inferred_only_product_keeps_reported_confidence(catalog):
    inferred = [InferredProduct(name="Slack", category="Communication", confidence="medium", source="LinkedIn")]
    stack = fuse([], inferred, catalog)

    assert [p.to_dict() for p in stack] == [{
        "name": "Slack",
        "category": "Communication",
        "url": "https://slack.com",
        "confidence": "medium",
        "sources": ["LinkedIn"],
        "evidence": [],
    }]


def test_inferred_url_wins_over_catalog(catalog):
    inferred = [InferredProduct(name="Slack", url="https://slack.com/enterprise", source="blog")]
    assert fuse([], inferred, catalog)[0].url == "https://slack.com/enterprise"


def test_unknown_inferred_product_has_no_url(catalog):
    inferred = [InferredProduct(name="Obscure Tool", source="G2")]
    assert fuse([], inferred, catalog)[0].url is None


def test_missing_source_is_recorded(catalog):
    stack = fuse([], [InferredProduct(name="Slack", source="")], catalog)
    assert stack[0].sources == [DEFAULT_INFERRED_SOURCE]


def test_empty_inputs(catalog):
    assert fuse([], [], catalog) == []

    detected = [_detected("Stripe"), _detected("Auth0", "low", 20)]
    stack = fuse(detected, [], catalog)
    assert {p.name for p in stack} == {"Stripe", "Auth0"}
    assert all(p.sources == ["website_detection"] for p in stack)


def test_duplicate_inferred_entries_escalate(catalog):
    inferred = [
        InferredProduct(name="Slack", confidence="low", source="job posting"),
        InferredProduct(name="SLACK", confidence="low", source="LinkedIn", evidence="profile"),
    ]
    stack = fuse([], inferred, catalog)
    assert len(stack) == 1
    assert stack[0].name == "Slack"
    assert stack[0].confidence == "high"
    assert stack[0].sources == ["job posting", "LinkedIn"]
    assert stack[0].evidence == ["profile"]


def test_fusion_does_not_mutate_inputs(catalog):
    detected = [_detected("Stripe", evidence=["script: a"])]
    inferred = [InferredProduct(name="Stripe", source="x", evidence="b")]
    fuse(detected, inferred, catalog)
    assert detected[0].evidence == ["script: a"]


def test_output_sorted_by_confidence_then_name(catalog):
    detected = [
        _detected("Zendesk", "low", 20),
        _detected("Amplitude", "high", 70),
        _detected("Hotjar", "medium", 40),
        _detected("auth0", "low", 20),
    ]
    inferred = [InferredProduct(name="Braze", confidence="high", source="G2")]
    stack = fuse(detected, inferred, catalog)

    assert [p.name for p in stack] == ["Amplitude", "Braze", "Hotjar", "auth0", "Zendesk"]
    ranks = [CONFIDENCE_RANK[p.confidence] for p in stack]
    assert ranks == sorted(ranks)


def test_fusion_is_order_independent(catalog):
    detected_a = [_detected("Stripe"), _detected("Hotjar", "low", 20)]
    inferred_a = [
        InferredProduct(name="Slack", confidence="medium", source="a"),
        InferredProduct(name="Asana", confidence="low", source="b"),
    ]
    first = fuse(detected_a, inferred_a, catalog)
    second = fuse(list(reversed(detected_a)), list(reversed(inferred_a)), catalog)

    assert [p.to_dict() for p in first] == [p.to_dict() for p in second]


def test_every_input_key_appears_once(catalog):
    detected = [_detected("Stripe"), _detected("Hotjar")]
    inferred = [InferredProduct(name="stripe", source="a"), InferredProduct(name="Slack", source="b")]
    keys = [p.key for p in fuse(detected, inferred, catalog)]
    assert sorted(keys) == ["hotjar", "slack", "stripe"]


def test_refusing_detected_only_stack_is_stable(catalog):
    detected = [_detected("Stripe", "medium"), _detected("Hotjar", "high", 70)]
    stack = fuse(detected, [], catalog)
    projected = [_detected(p.name, p.confidence, 0, list(p.evidence), p.url, p.category) for p in stack]
    again = fuse(projected, [], catalog)
    assert [p.to_dict() for p in again] == [p.to_dict() for p in stack]


def test_unknown_inferred_confidence_becomes_low(catalog):
    inferred = [InferredProduct.from_dict({"name": "Slack", "confidence": "very likely", "source": "x"})]
    assert fuse([], inferred, catalog)[0].confidence == "low"


def test_inferred_product_with_null_name_is_nameless():
    product = InferredProduct.from_dict({"name": None, "source": "x", "category": None})
    assert product.name == ""
    assert product.category == "Other"


def test_list_evidence_is_flattened_to_text(catalog):
    product = InferredProduct.from_dict({
        "name": "Slack",
        "source": ["job posting", "case study"],
        "evidence": ["a", None, "b"],
    })
    assert product.source == "job posting; case study"
    assert product.evidence == "a; b"

    combined = fuse([_detected("Slack")], [product], catalog)[0]
    assert combined.evidence == ["script: slack", "a; b"]
    assert all(isinstance(item, str) for item in combined.evidence + combined.sources)


@pytest.mark.parametrize("inferred_order", [(0, 1, 2), (2, 1, 0), (1, 2, 0)])
def test_corroboration_is_order_independent(catalog, inferred_order):
    detected = [_detected("Stripe", "low", 20), _detected("Hotjar", "medium", 40)]
    inferred = [
        InferredProduct(name="stripe", confidence="low", source="a"),
        InferredProduct(name="Slack", confidence="medium", source="b"),
        InferredProduct(name="Asana", confidence="low", source="c"),
    ]
    permuted = [inferred[i] for i in inferred_order]

    stack = {p.key: p for p in fuse(list(reversed(detected)), permuted, catalog)}
    baseline = {p.key: p for p in fuse(detected, inferred, catalog)}

    assert stack["stripe"].confidence == baseline["stripe"].confidence == "high"
    assert stack["stripe"].sources == ["website_detection", "a"]
    assert {k: p.to_dict() for k, p in stack.items()} == {k: p.to_dict() for k, p in baseline.items()}
