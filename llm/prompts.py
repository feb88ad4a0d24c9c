"""Prompt builders for the LLM collaborator."""
from typing import Optional


def score_product_prompt(page) -> str:
    return f"""You are an analyst helping procurement teams reduce SaaS costs and vendor dependency.

Product URL: {page.url}
Title: {page.title}
Description: {page.meta_description}
Headlines: {page.h1_text} | {page.h2_text}
Page content (excerpt): {page.body_text}

Analyze this product and return ONLY valid JSON:
{{
  "product_name": "string",
  "core_function": "one sentence description",
  "vulnerability_score": <1-10, where 10 = trivially replaceable by AI today>,
  "replacement_timeline": "e.g. '6-18 months' or 'already happening'",
  "replacement_mechanism": "how AI/automation replaces this specifically",
  "moat_factors": ["what protects this vendor"],
  "negotiation_leverage": "one-liner for procurement to use",
  "comparable_at_risk": ["similar products also at risk"],
  "estimated_annual_cost": <integer USD for mid-market, or null>,
  "alternatives": [
    {{
      "name": "Alternative name",
      "type": "ai_native|open_source|cheaper_saas|build_internal",
      "url": "https://alternative.com",
      "estimated_savings": "40-60%",
      "migration_difficulty": "easy|medium|hard",
      "description": "why this is a viable alternative"
    }}
  ],
  "vendor_lock_in": [
    {{
      "lock_in_type": "e.g. Data format, API dependencies, Workflow integrations",
      "severity": "low|medium|high",
      "escape_tactic": "specific action to reduce this lock-in",
      "timeline": "how long to implement the escape"
    }}
  ],
  "escape_plan": "step-by-step plan to migrate away within 6 months",
  "negotiation_script": "2-3 sentence script for renewal negotiations"
}}

Provide 3-5 alternatives (prioritize AI-native and open source).
Identify 2-4 vendor lock-in factors with specific escape tactics."""


def infer_stack_from_sources_prompt(company: str) -> str:
    return f"""You are a technology analyst researching the software stack used by "{company}".

Use job postings, employee profiles, review sites and customer case studies,
public stack profiles, engineering blogs, press releases and public code.
Tools named in job requirements are the most reliable signals.

Return ONLY valid JSON:
{{
  "company_info": {{
    "name": "Official company name",
    "industry": "Their industry",
    "size_estimate": "startup/smb/midmarket/enterprise",
    "tech_sophistication": "low/medium/high"
  }},
  "sources_checked": ["list of sources you found data from"],
  "products": [
    {{
      "name": "Product Name",
      "category": "CRM/Analytics/Support/HR/DevOps/etc",
      "url": "https://product-url.com",
      "confidence": "high/medium/low",
      "source": "where you found this (e.g., 'job posting for Senior Engineer')",
      "evidence": "brief quote or description of the evidence"
    }}
  ]
}}

Include 10-25 products if possible. Focus on paid SaaS with meaningful contracts.
Skip free tools and browser extensions."""


def infer_saas_stack_prompt(company: str) -> str:
    return f"""You are researching the SaaS tools used by "{company}".

Look at job postings, employee profiles, review sites, tech stack disclosure
sites and company or engineering blog posts.

Return ONLY valid JSON:
{{
  "company": "{company}",
  "inferred_stack": [
    {{
      "name": "Product Name",
      "category": "e.g. CRM, Support, Analytics, HR",
      "url": "https://product-homepage.com",
      "confidence": "high|medium|low",
      "source": "brief note on where this was found"
    }}
  ],
  "notes": "any relevant context about the company's tech sophistication"
}}

Focus on SaaS products with meaningful annual contracts. Include 5-15 products if possible."""


def find_companies_prompt(product: str, industry: Optional[str], company_size: Optional[str], limit: int) -> str:
    filter_desc = ""
    if industry:
        filter_desc += f" in the {industry} industry"
    if company_size:
        filter_desc += f" of {company_size} size"

    return f"""Find companies that use "{product}"{filter_desc}.

Look for case studies on {product}'s website, reviews naming companies,
press releases, job postings requiring {product} experience and public
stack profiles.

Return ONLY valid JSON:
{{
  "product": "{product}",
  "companies": [
    {{
      "name": "Company Name",
      "industry": "Their industry",
      "size": "startup/smb/midmarket/enterprise",
      "confidence": "high/medium/low",
      "source": "where you found this",
      "domain": "company.com if known"
    }}
  ],
  "total_found": <number>,
  "notes": "any relevant context about {product}'s market presence"
}}

Return up to {limit} companies, prioritizing well-known names and high-confidence matches."""


def analyze_category_prompt(category: str) -> str:
    return f"""Analyze the "{category}" SaaS category for AI vulnerability.

Cover the top 10-15 products, how AI already affects the category, which
products are most and least vulnerable, emerging AI-native alternatives and
the expected disruption timeline.

Return ONLY valid JSON:
{{
  "category": "{category}",
  "market_size_estimate": "string",
  "ai_disruption_stage": "early/growing/accelerating/mature",
  "products": [
    {{
      "name": "Product Name",
      "url": "https://product.com",
      "market_position": "leader/challenger/niche",
      "vulnerability_estimate": <1-10>,
      "key_vulnerability": "why it's vulnerable",
      "key_moat": "what protects it"
    }}
  ],
  "emerging_ai_alternatives": [
    {{
      "name": "AI Alternative",
      "url": "https://alternative.com",
      "threat_level": "high/medium/low",
      "description": "what it does"
    }}
  ],
  "disruption_timeline": "string describing expected timeline",
  "procurement_advice": "what procurement teams should do about this category"
}}"""
