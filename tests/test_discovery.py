import json

import pytest

from core.discovery import (
    analyze_category,
    discover_bulk,
    discover_company_stack,
    extract_domain,
    find_companies_using,
    infer_saas_stack,
)
from core.errors import LLMResponseError
from models.detection import DetectedProduct


@pytest.mark.parametrize("target,expected", [
    ("https://www.acme.io/about", "www.acme.io"),
    ("http://acme.io", "acme.io"),
    ("www.acme.io", "acme.io"),
    ("acme.io", "acme.io"),
    ("Acme Corp", "acmecorp.com"),
    ("  Acme, Inc.  ", "acmeinc.com"),
    ("!!!", None),
    ("", None),
])
def test_extract_domain(target, expected):
    assert extract_domain(target) == expected


class FakeEngine:
    def __init__(self, detected):
        self.detected = detected
        self.domains = []

    async def detect(self, domain):
        self.domains.append(domain)
        return self.detected


STRIPE_DETECTED = DetectedProduct(
    name="Stripe", category="Payments", confidence="medium", score=40,
    evidence=["script: https://js.stripe.com/v3/"], url="https://stripe.com",
)

SOURCES_REPLY = json.dumps({
    "company_info": {"name": "Acme", "industry": "Retail", "size_estimate": "smb", "tech_sophistication": "medium"},
    "sources_checked": ["job postings"],
    "products": [
        {"name": "stripe", "category": "Payments", "confidence": "low", "source": "job posting", "evidence": "Stripe API"},
        {"name": "Slack", "category": "Communication", "confidence": "medium", "source": "LinkedIn"},
        {"category": "Nameless"},
        "not an object",
    ],
})


@pytest.mark.asyncio
async def test_discover_company_stack_fuses_detection_and_inference(fake_llm):
    engine = FakeEngine([STRIPE_DETECTED])
    llm = fake_llm({'software stack used by "acme.io"': SOURCES_REPLY})

    result = await discover_company_stack("acme.io", llm, engine)

    assert engine.domains == ["acme.io"]
    assert [p.name for p in result.detected] == ["Stripe"]
    assert [p.name for p in result.inferred] == ["stripe", "Slack"]
    assert result.metadata["company_info"]["industry"] == "Retail"
    assert result.metadata["sources_checked"] == ["job postings"]

    combined = {p.name: p for p in result.combined}
    assert combined["Stripe"].confidence == "high"
    assert combined["Stripe"].sources == ["website_detection", "job posting"]
    assert combined["Slack"].url == "https://slack.com"
    assert [p.name for p in result.combined] == ["Stripe", "Slack"]

    data = result.to_dict()
    assert set(data) == {"company", "detected", "inferred", "combined", "metadata"}


@pytest.mark.asyncio
async def test_discover_without_web_detection(fake_llm):
    engine = FakeEngine([STRIPE_DETECTED])
    llm = fake_llm(default=SOURCES_REPLY)

    result = await discover_company_stack("Acme", llm, engine, include_web_detection=False)

    assert engine.domains == []
    assert result.detected == []
    assert {p.confidence for p in result.combined} == {"low", "medium"}


@pytest.mark.asyncio
async def test_discover_propagates_unparseable_inference(fake_llm):
    with pytest.raises(LLMResponseError):
        await discover_company_stack("acme.io", fake_llm(default="Sorry, I can't help"), FakeEngine([]))


@pytest.mark.asyncio
async def test_discover_bulk_isolates_failures(fake_llm):
    llm = fake_llm({'"good.io"': SOURCES_REPLY, '"bad.io"': "not json"})
    progress = []

    results = await discover_bulk(
        ["good.io", "bad.io"], llm, FakeEngine([]),
        on_progress=lambda done, total, company: progress.append((done, total, company)),
    )

    assert [r.company for r in results] == ["good.io", "bad.io"]
    assert results[0].success and not results[1].success
    assert "not valid JSON" in results[1].error
    assert results[1].to_dict() == {"success": False, "company": "bad.io", "error": results[1].error}
    assert progress == [(1, 2, "good.io"), (2, 2, "bad.io")]


@pytest.mark.asyncio
async def test_infer_saas_stack(fake_llm):
    reply = "```json\n" + json.dumps({
        "company": "Acme",
        "inferred_stack": [{"name": "Zendesk", "url": "https://zendesk.com", "confidence": "HIGH", "source": "G2"}],
        "notes": "cloud-first",
    }) + "\n```"
    result = await infer_saas_stack("Acme", fake_llm(default=reply))

    assert result["notes"] == "cloud-first"
    product = result["inferred_stack"][0]
    assert product.name == "Zendesk"
    assert product.confidence == "high"
    assert product.category == "Other"


@pytest.mark.asyncio
async def test_find_companies_using_applies_limit(fake_llm):
    reply = json.dumps({
        "product": "Zendesk",
        "companies": [{"name": f"Company {i}"} for i in range(5)] + ["junk"],
        "total_found": 5,
    })
    llm = fake_llm(default=reply)

    result = await find_companies_using("Zendesk", llm, industry="retail", limit=3)

    assert [c["name"] for c in result["companies"]] == ["Company 0", "Company 1", "Company 2"]
    assert "in the retail industry" in llm.prompts[0]


@pytest.mark.asyncio
async def test_analyze_category(fake_llm):
    reply = json.dumps({"ai_disruption_stage": "accelerating", "products": []})
    result = await analyze_category("customer support", fake_llm(default=reply))
    assert result == {"ai_disruption_stage": "accelerating", "products": [], "category": "customer support"}
