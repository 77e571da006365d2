"""Deterministic stand-ins used when the language model is unavailable."""

import hashlib
from typing import Optional

from lead_research.config import settings
from lead_research.models import Company, ICP
from .base import ExtractionOracle, OracleResult, OutreachOracle

# What the extraction model returns for the sample newsletter
DEMO_COMPANIES = [
    {
        "company": "TechFlow Analytics",
        "round": "Series A",
        "amount": "$8M",
        "sector": "FinTech",
        "HQ": "San Francisco, USA",
        "snippet": "AI-powered financial analytics platform that helps banks automate risk assessment and fraud detection",
    },
    {
        "company": "DataVision Corp",
        "round": "Series B",
        "amount": "$15M",
        "sector": "Business Intelligence",
        "HQ": "London, UK",
        "snippet": "Real-time business intelligence platform using machine learning for predictive analytics in financial services",
    },
    {
        "company": "CloudSync Solutions",
        "round": "Seed",
        "amount": "$4.5M",
        "sector": "FinTech",
        "HQ": "Berlin, Germany",
        "snippet": "Cloud-based payment orchestration platform enabling seamless integration with multiple payment providers through single API",
    },
    {
        "company": "AutoInsights",
        "round": "Series A",
        "amount": "$6M",
        "sector": "AI",
        "HQ": "Munich, Germany",
        "snippet": "AI-powered analytics platform for automotive manufacturers helping optimize supply chain operations and predict maintenance",
    },
    {
        "company": "SecureBank",
        "round": "Series B",
        "amount": "$25M",
        "sector": "Cybersecurity",
        "HQ": "Amsterdam, Netherlands",
        "snippet": "Cybersecurity platform specializing in protecting financial institutions from advanced persistent threats using machine learning",
    },
    {
        "company": "InvestorPro",
        "round": "Seed",
        "amount": "$7M",
        "sector": "SaaS",
        "HQ": "Stockholm, Sweden",
        "snippet": "Portfolio management SaaS tools for independent financial advisors featuring automated compliance reporting and client communication",
    },
    {
        "company": "TradingBot",
        "round": "Pre-Series A",
        "amount": "$3.2M",
        "sector": "FinTech",
        "HQ": "Copenhagen, Denmark",
        "snippet": "Algorithmic trading platform for retail investors using AI to democratize sophisticated trading strategies",
    },
]

SNIPPET_KEYWORDS = [
    "automation", "AI", "analytics", "platform", "integration",
    "optimization", "prediction", "intelligence", "solutions",
]

OUTREACH_TEMPLATES = [
    "Congrats on your {round}! Love how {name} is transforming {sector}.\n"
    "{sender} could help scale your sales process - would love to explore how we could support your growth.",

    "Exciting news about your {amount} raise! {name}'s approach to {keyword} is impressive.\n"
    "Our platform could accelerate your customer acquisition - interested in a quick chat?",

    "Just saw the announcement about {name}'s funding round. Your work in {sector} aligns perfectly with what we see in the market.\n"
    "{sender} could be a great fit for your expansion plans - worth a conversation?",

    "Congratulations on securing {amount}! {name} is clearly solving a real problem in {sector}.\n"
    "We help companies like yours scale efficiently - would love to share how {sender} could support your journey.",

    "Amazing progress with your {round} at {name}! Your focus on {keyword} resonates with our mission.\n"
    "{sender} could complement your growth strategy beautifully - open to a brief discussion?",
]


def demo_companies() -> list[Company]:
    """Fresh copies of the built-in demo dataset, flagged as demo data."""
    return [
        Company.model_validate({**item, "demoData": True})
        for item in DEMO_COMPANIES
    ]


def extract_keyword(snippet: str) -> str:
    """First known keyword mentioned in the snippet."""
    lowered = (snippet or "").lower()
    for keyword in SNIPPET_KEYWORDS:
        if keyword.lower() in lowered:
            return keyword
    return "innovation"


def template_index(name: str) -> int:
    """Stable template choice for a company name, identical across processes."""
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % len(OUTREACH_TEMPLATES)


def template_outreach_message(company: Company, sender: Optional[str] = None) -> str:
    """Deterministic outreach message built from a fixed template."""
    template = OUTREACH_TEMPLATES[template_index(company.name)]
    return template.format(
        name=company.name,
        round=company.round or "funding round",
        amount=company.amount or "new funding",
        sector=(company.sector or "your market").lower(),
        keyword=extract_keyword(company.snippet),
        sender=sender or settings.sender_name,
    )


class DemoExtractionOracle(ExtractionOracle):
    """Always returns the built-in demo dataset."""

    name = "demo-extraction"

    async def extract(self, newsletter_text: str) -> OracleResult[list[Company]]:
        return OracleResult.success(demo_companies())


class TemplateOutreachOracle(OutreachOracle):
    """Always returns the templated message."""

    name = "template-outreach"

    def __init__(self, sender: Optional[str] = None):
        self.sender = sender

    async def generate(self, company: Company, icp: ICP) -> OracleResult[str]:
        return OracleResult.success(template_outreach_message(company, self.sender))
