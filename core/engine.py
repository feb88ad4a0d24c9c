from urllib.parse import urlparse
import asyncio
import logging
from typing import List, Optional, Set

import httpx

from core.context import PageEvidence, ScanContext
from core.html_utils import extract_page_evidence
from core.matcher import FingerprintMatcher
from fetch.dns_client import get_dns_content
from fetch.http_client import fetch_url
from models.detection import DetectedProduct
from rules.rules_loader import FingerprintCatalog


def _target_url(domain_or_url: str) -> str:
    return domain_or_url if domain_or_url.startswith("http") else f"https://{domain_or_url}"


def _dns_domain(url: str) -> Optional[str]:
    hostname = urlparse(url).hostname
    if not hostname:
        return None
    return hostname[4:] if hostname.startswith("www.") else hostname


class Engine:
    def __init__(self, catalog: Optional[FingerprintCatalog] = None, exclude_analyzers: Set[str] = None):
        """Initialize the engine with a fingerprint matcher.

        Args:
            catalog: Fingerprint catalog (defaults to the bundled rules)
            exclude_analyzers: Set of analyzer names to exclude (e.g., {'dns'})
        """
        self.logger = logging.getLogger(__name__)
        self.matcher = FingerprintMatcher(catalog, exclude_analyzers=exclude_analyzers)
        self.logger.info(f"Loaded {len(self.matcher.catalog.products)} product fingerprints")

        if exclude_analyzers:
            self.logger.info(f"Excluded analyzers: {', '.join(sorted(exclude_analyzers))}")

    async def collect(self, domain_or_url: str) -> ScanContext:
        """
        Gather website and DNS evidence for a domain.

        An unreachable website is not fatal: the page evidence is left empty
        and DNS evidence is still collected.
        """
        logger = self.logger
        url = _target_url(domain_or_url)
        logger.debug(f"Starting collect for {url}")
        loop = asyncio.get_running_loop()

        domain = _dns_domain(url)
        # DNS lookups are blocking, run them in the executor while the page loads
        if domain:
            dns_task = loop.run_in_executor(None, get_dns_content, domain)
        else:
            dns_task = loop.create_future()
            dns_task.set_result(("", ""))

        page = PageEvidence()
        headers = {}
        status_code = None
        try:
            response = await fetch_url(url)
            status_code = response.status_code
            headers = {k.lower(): v for k, v in response.headers.items()}
            page = extract_page_evidence(response.text)
            logger.debug(
                f"HTTP response: status={status_code}, scripts={len(page.scripts)}, "
                f"inline={len(page.inline_scripts)}, iframes={len(page.iframes)}"
            )
        except httpx.HTTPError as e:
            logger.warning(f"Website fetch failed for {url}, continuing with DNS only: {e}")

        dns_content, mx_content = await dns_task
        if dns_content.strip():
            logger.debug(f"DNS content for {domain}: {len(dns_content)} chars")

        return ScanContext(
            url=url,
            page=page,
            headers=headers,
            dns_content=dns_content,
            mx_content=mx_content,
            status_code=status_code,
        )

    def analyze_context(self, context: ScanContext) -> List[DetectedProduct]:
        detected = self.matcher.match(context)
        self.logger.info(f"Detected {len(detected)} products on {context.url}")
        return detected

    async def detect(self, domain_or_url: str) -> List[DetectedProduct]:
        """Fingerprint a company's website and DNS."""
        context = await self.collect(domain_or_url)
        return self.analyze_context(context)
