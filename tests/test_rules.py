import textwrap

import pytest

from core.rules_validator import has_errors, validate_catalog
from models.technology import DEFAULT_RULE_WEIGHTS
from rules.rules_loader import get_catalog, get_product_category, load_catalog


@pytest.fixture
def rules_dir(tmp_path):
    (tmp_path / "fingerprints.yaml").write_text(textwrap.dedent("""
        - name: Acme Chat
          url: https://acmechat.example
          evidence:
            - {type: script, pattern: 'acmechat\\.io'}
            - {type: global, pattern: AcmeChat, weight: 50}
            - {type: cookie, pattern: acme_session}
        - name: Acme Chat
          evidence:
            - {type: meta, pattern: '(unclosed'}
        - name: Lonely
          evidence:
            - {type: dns, pattern: 'lonely-verify'}
        - name: Broken
    """))
    (tmp_path / "categories.yaml").write_text(textwrap.dedent("""
        Support: [Acme Chat]
        Chat: [Acme Chat, Mail Suite]
    """))
    (tmp_path / "mail_providers.yaml").write_text(textwrap.dedent("""
        - name: Mail Suite
          url: https://mail.example
          pattern: 'mailsuite'
    """))
    return str(tmp_path)


def test_load_catalog_from_directory(rules_dir):
    catalog = load_catalog(rules_dir)

    names = [p.product_name for p in catalog.products]
    assert names == ["Acme Chat", "Acme Chat", "Lonely"]

    acme = catalog.products[0]
    assert acme.category == "Support"
    assert acme.canonical_url == "https://acmechat.example"
    assert [(r.kind, r.weight) for r in acme.rules] == [("script", DEFAULT_RULE_WEIGHTS["script"]), ("global", 50)]

    assert catalog.category_for("Mail Suite") == "Chat"
    assert catalog.category_for("Lonely") == "Other"
    assert catalog.url_for("Mail Suite") == "https://mail.example"
    assert catalog.url_for("Lonely") is None
    assert catalog.mail_providers[0].score == 80


def test_validate_catalog_reports_problems(rules_dir):
    report = validate_catalog(rules_dir)

    assert report["total_products"] == 4
    assert report["duplicate_names"] == {"Acme Chat": 2}
    assert report["unknown_kinds"] == {"Acme Chat": ["cookie"]}
    assert list(report["invalid_patterns"]) == ["Acme Chat"]
    assert report["missing"]["category"] == ["Lonely", "Broken"]
    assert "Lonely" in report["missing"]["url"]
    assert has_errors(report)


def test_bundled_catalog_is_clean():
    report = validate_catalog()
    assert report["duplicate_names"] == {}
    assert report["unknown_kinds"] == {}
    assert report["invalid_patterns"] == {}
    assert report["missing"]["category"] == []
    assert not has_errors(report)


def test_bundled_catalog_contents():
    catalog = get_catalog()
    names = {p.product_name for p in catalog.products}
    assert {"Stripe", "Intercom", "Cloudflare", "Greenhouse", "Vimeo"} <= names
    assert {m.product_name for m in catalog.mail_providers} == {"Google Workspace", "Microsoft 365"}
    assert get_product_category("HubSpot") == "Customer Support"
    assert get_product_category("Not A Product") == "Other"
    assert catalog.url_for("Stripe") == "https://stripe.com"
    assert catalog.url_for("Fastly") is None
