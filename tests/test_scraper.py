from unittest.mock import AsyncMock

import httpx
import pytest

from core.errors import ScrapeError
from core.html_utils import extract_page_evidence
from fetch.scraper import parse_page, scrape_page, scrape_pages


SAMPLE_HTML = """
<html>
<head>
  <title>Acme &amp; Co | Support</title>
  <meta name="description" content="Helpdesk software for teams">
  <meta name="generator" content="WordPress 6.4">
  <meta property="og:site_name" content='Acme'>
  <script src="https://widget.intercom.io/widget/abc123"></script>
  <script async src='https://js.stripe.com/v3/'></script>
  <script>window.Intercom('boot', {app_id: 'abc123'});</script>
  <script type="application/ld+json"></script>
</head>
<body>
  <header><h1>Header heading</h1></header>
  <nav><a href="/">Home</a></nav>
  <h1>Support that <em>scales</em></h1>
  <h2>Ticketing</h2><h2>AI agents</h2>
  <p>Resolve   customer
     issues faster.</p>
  <iframe src="https://calendly.com/acme/demo"></iframe>
  <footer>Copyright Acme</footer>
</body>
</html>
"""


def test_extract_page_evidence():
    evidence = extract_page_evidence(SAMPLE_HTML)

    assert evidence.scripts == ["https://widget.intercom.io/widget/abc123", "https://js.stripe.com/v3/"]
    assert evidence.inline_scripts == ["window.Intercom('boot', {app_id: 'abc123'});"]
    assert evidence.iframes == ["https://calendly.com/acme/demo"]
    assert "WordPress 6.4" in evidence.meta_content
    assert "generator" in evidence.meta_content
    assert "Helpdesk software for teams" in evidence.meta_content


def test_extract_page_evidence_empty():
    evidence = extract_page_evidence("")
    assert evidence.scripts == [] and evidence.inline_scripts == [] and evidence.iframes == [] and evidence.meta_content == []


def test_parse_page_strips_noise():
    page = parse_page("https://acme.example", SAMPLE_HTML)

    assert page.url == "https://acme.example"
    assert page.title == "Acme & Co | Support"
    assert page.meta_description == "Helpdesk software for teams"
    assert page.h1_text == "Support that scales"
    assert page.h2_text == "Ticketing | AI agents"
    assert "Resolve customer issues faster." in page.body_text
    assert "Copyright" not in page.body_text
    assert "Home" not in page.body_text
    assert "Intercom" not in page.body_text


def test_parse_page_limits_headings_and_body():
    html = "<body>" + "".join(f"<h2>Section {i}</h2>" for i in range(15)) + "x" * 5000 + "</body>"
    page = parse_page("https://acme.example", html)
    assert page.h2_text.count("|") == 9
    assert len(page.body_text) == 3000


def _response(status, text="", url="https://acme.example"):
    return httpx.Response(status, text=text, request=httpx.Request("GET", url))


@pytest.mark.asyncio
async def test_scrape_page_success(monkeypatch):
    monkeypatch.setattr("fetch.scraper.fetch_url", AsyncMock(return_value=_response(200, SAMPLE_HTML)))
    page = await scrape_page("https://acme.example")
    assert page.title == "Acme & Co | Support"


@pytest.mark.asyncio
async def test_scrape_page_non_success_status(monkeypatch):
    monkeypatch.setattr("fetch.scraper.fetch_url", AsyncMock(return_value=_response(404)))
    with pytest.raises(ScrapeError, match="404"):
        await scrape_page("https://acme.example")


@pytest.mark.asyncio
async def test_scrape_page_network_error(monkeypatch):
    monkeypatch.setattr("fetch.scraper.fetch_url", AsyncMock(side_effect=httpx.ConnectError("refused")))
    with pytest.raises(ScrapeError, match="refused"):
        await scrape_page("https://acme.example")


@pytest.mark.asyncio
async def test_scrape_pages_records_failures_in_order(monkeypatch):
    async def fake_fetch(url, **kwargs):
        if "down" in url:
            raise httpx.ConnectTimeout("timed out")
        return _response(200, f"<title>{url}</title>", url)

    monkeypatch.setattr("fetch.scraper.fetch_url", fake_fetch)
    urls = ["https://a.example", "https://down.example", "https://c.example", "https://d.example"]

    results = await scrape_pages(urls, delay_seconds=0)

    assert [r.url for r in results] == urls
    assert [r.success for r in results] == [True, False, True, True]
    assert results[0].data.title == "https://a.example"
    assert "timed out" in results[1].error
    assert results[1].data is None
