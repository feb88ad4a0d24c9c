"""Regex-based HTML extraction for fingerprint evidence and product page text."""
import html as html_lib
import re
from typing import List

from core.context import PageEvidence

# Cap HTML scanned by regex to avoid catastrophic backtracking on huge pages
MAX_HTML_SCAN_LENGTH = 1_000_000
BODY_TEXT_LIMIT = 3000
MAX_H2_COUNT = 10

# Blocks that carry navigation or code rather than product copy
NOISE_TAGS = ("nav", "footer", "script", "style", "noscript", "header", "aside")

_SCRIPT_SRC_RE = re.compile(r'<script\b[^>]*?\bsrc\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
_INLINE_SCRIPT_RE = re.compile(r'<script\b(?![^>]*\bsrc\s*=)[^>]*>(.*?)</script\s*>', re.IGNORECASE | re.DOTALL)
_IFRAME_SRC_RE = re.compile(r'<iframe\b[^>]*?\bsrc\s*=\s*["\']([^"\']+)["\']', re.IGNORECASE)
_META_TAG_RE = re.compile(r'<meta\b[^>]*>', re.IGNORECASE)
_ATTR_RE = re.compile(r'([\w:-]+)\s*=\s*(?:"([^"]*)"|\'([^\']*)\'|([^\s"\'>]+))')
_TAG_RE = re.compile(r'<[^>]+>')
_WHITESPACE_RE = re.compile(r'\s+')


def _attributes(tag: str) -> dict:
    attrs = {}
    for match in _ATTR_RE.finditer(tag):
        name = match.group(1).lower()
        value = next((g for g in match.groups()[1:] if g is not None), "")
        attrs.setdefault(name, html_lib.unescape(value))
    return attrs


def clean_text(fragment: str) -> str:
    """Strip tags, decode entities and collapse whitespace."""
    text = _TAG_RE.sub(" ", fragment)
    return _WHITESPACE_RE.sub(" ", html_lib.unescape(text)).strip()


def extract_page_evidence(html: str) -> PageEvidence:
    """
    Extract fingerprint evidence lists from a page.

    Args:
        html: Raw HTML of the page

    Returns:
        PageEvidence with script srcs, inline script bodies, iframe srcs and
        meta content/name values
    """
    scan_html = (html or "")[:MAX_HTML_SCAN_LENGTH]

    scripts = [html_lib.unescape(src) for src in _SCRIPT_SRC_RE.findall(scan_html)]
    inline_scripts = [body for body in _INLINE_SCRIPT_RE.findall(scan_html) if body.strip()]
    iframes = [html_lib.unescape(src) for src in _IFRAME_SRC_RE.findall(scan_html)]

    meta_content: List[str] = []
    for tag in _META_TAG_RE.findall(scan_html):
        attrs = _attributes(tag)
        meta_content.append(attrs.get("content", ""))
        meta_content.append(attrs.get("name", ""))

    return PageEvidence(
        scripts=scripts,
        inline_scripts=inline_scripts,
        iframes=iframes,
        meta_content=meta_content,
    )


def strip_noise(html: str) -> str:
    """Remove nav/footer/script/style/noscript/header/aside blocks."""
    for tag in NOISE_TAGS:
        html = re.sub(rf'<{tag}\b[^>]*>.*?</{tag}\s*>', " ", html, flags=re.IGNORECASE | re.DOTALL)
    return html


def extract_title(html: str) -> str:
    match = re.search(r'<title\b[^>]*>(.*?)</title\s*>', html, re.IGNORECASE | re.DOTALL)
    return clean_text(match.group(1)) if match else ""


def extract_meta_description(html: str) -> str:
    for tag in _META_TAG_RE.findall(html):
        attrs = _attributes(tag)
        if attrs.get("name", "").lower() == "description":
            return attrs.get("content", "").strip()
    return ""


def extract_headings(html: str, level: int) -> List[str]:
    pattern = rf'<h{level}\b[^>]*>(.*?)</h{level}\s*>'
    headings = [clean_text(h) for h in re.findall(pattern, html, re.IGNORECASE | re.DOTALL)]
    return [h for h in headings if h]


def extract_body_text(html: str, limit: int = BODY_TEXT_LIMIT) -> str:
    match = re.search(r'<body\b[^>]*>(.*)</body\s*>', html, re.IGNORECASE | re.DOTALL)
    body = match.group(1) if match else html
    return clean_text(body)[:limit]
