import dns.exception
import dns.resolver
import logging
from typing import List, Optional

# Default DNS timeout (in seconds)
DEFAULT_DNS_TIMEOUT = 5.0

# Subdomains commonly pointed at hosted support/mail/status vendors
CNAME_SUBDOMAINS = ["mail", "email", "support", "help", "status"]

logger = logging.getLogger(__name__)


def _resolve(hostname: str, record_type: str, timeout: Optional[float] = None):
    """Resolve one record type; any DNS failure yields no answers."""
    resolver = dns.resolver.Resolver()
    resolver.lifetime = timeout or DEFAULT_DNS_TIMEOUT
    try:
        answers = resolver.resolve(hostname, record_type)
        logger.debug(f"DNS {record_type} {hostname}: {len(answers)} records")
        return list(answers)
    except dns.exception.DNSException as e:
        logger.debug(f"DNS {record_type} {hostname}: no records ({type(e).__name__})")
        return []


def resolve_txt(domain: str, timeout: Optional[float] = None) -> List[str]:
    """TXT record strings for a domain (multi-part records are joined)."""
    records = []
    for answer in _resolve(domain, "TXT", timeout):
        records.append("".join(part.decode("utf-8", errors="replace") for part in answer.strings))
    return records


def resolve_mx(domain: str, timeout: Optional[float] = None) -> List[str]:
    """MX exchange hostnames for a domain, without the trailing dot."""
    return [answer.exchange.to_text().rstrip(".") for answer in _resolve(domain, "MX", timeout)]


def resolve_cname(domain: str, timeout: Optional[float] = None) -> List[str]:
    return [answer.target.to_text().rstrip(".") for answer in _resolve(domain, "CNAME", timeout)]


def get_dns_content(domain: str, timeout: Optional[float] = None) -> tuple[str, str]:
    """
    Collects the DNS text used for fingerprinting.

    Args:
        domain: Bare domain (no scheme, no www.)
        timeout: Per-query timeout in seconds (default: 5s)

    Returns:
        Tuple of (dns_content, mx_content): TXT + MX + CNAME records joined
        by spaces, and the MX hosts alone
    """
    txt_string = " ".join(resolve_txt(domain, timeout))
    mx_string = " ".join(resolve_mx(domain, timeout))

    cname_results: List[str] = []
    for sub in CNAME_SUBDOMAINS:
        cname_results.extend(resolve_cname(f"{sub}.{domain}", timeout))
    cname_string = " ".join(cname_results)

    return f"{txt_string} {mx_string} {cname_string}", mx_string
