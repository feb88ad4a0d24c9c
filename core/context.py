from dataclasses import dataclass, field
from typing import Dict, List, Optional

@dataclass(frozen=True)
class PageEvidence:
    """Evidence lists extracted from one HTML page."""
    scripts: List[str] = field(default_factory=list) # src URLs of <script> tags
    inline_scripts: List[str] = field(default_factory=list) # bodies of <script> tags without src
    iframes: List[str] = field(default_factory=list) # src URLs of <iframe> tags
    meta_content: List[str] = field(default_factory=list) # content and name attributes of <meta> tags

@dataclass(frozen=True)
class ScanContext:
    url: Optional[str] = None
    page: PageEvidence = field(default_factory=PageEvidence)
    headers: Dict[str, str] = field(default_factory=dict) # lowercased header names
    dns_content: str = "" # TXT + MX + CNAME records joined by spaces
    mx_content: str = "" # MX exchange hosts joined by spaces
    status_code: Optional[int] = None

    @property
    def scripts(self) -> List[str]:
        return self.page.scripts

    @property
    def inline_scripts(self) -> List[str]:
        return self.page.inline_scripts

    @property
    def iframes(self) -> List[str]:
        return self.page.iframes

    @property
    def meta_content(self) -> List[str]:
        return self.page.meta_content
