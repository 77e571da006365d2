"""Oracles backed by the Claude API."""

import asyncio
import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from lead_research.config import settings
from lead_research.models import Company, ICP
from .base import ExtractionOracle, OracleResult, OutreachOracle, ScoreEnhancer

logger = logging.getLogger(__name__)

# Keys the extraction model may set; enrichment, scoring and flags come later
EXTRACTION_KEYS = ("company", "round", "amount", "sector", "HQ", "snippet")


class ClaudeOracleError(Exception):
    """A Claude call returned nothing usable."""


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code block, if any."""
    text = text.strip()
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0]
    elif text.startswith("```"):
        text = text.split("```", 2)[1]
    return text.strip()


def parse_extraction_response(text: str) -> list[Company]:
    """Parse the model's JSON array of companies.

    Only the wire keys in ``EXTRACTION_KEYS`` are read; other keys (including
    field names such as ``name`` or ``headcount``) are ignored. Items that are
    not objects or fail validation (e.g. no ``company``) are skipped with a
    warning.

    Raises:
        ClaudeOracleError: if the text is not a JSON array.
    """
    try:
        data = json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise ClaudeOracleError(f"response is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise ClaudeOracleError(f"expected a JSON array, got {type(data).__name__}")

    companies = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            logger.warning(f"Skipping extracted item {i}: not an object")
            continue
        fields = {key: item[key] for key in EXTRACTION_KEYS if key in item}
        try:
            companies.append(Company.model_validate(fields))
        except ValidationError as e:
            logger.warning(f"Skipping extracted item {i}: {e.errors()[0]['msg']}")
    return companies


class ClaudeClient:
    """Shared Anthropic client handling for the Claude oracles."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Any = None,
    ):
        self.api_key = api_key if api_key is not None else settings.anthropic_api_key
        self.model = model or settings.llm_model
        self._client = client

    @property
    def client(self):
        """Lazy-load Anthropic client."""
        if self._client is None:
            if not self.api_key:
                raise ClaudeOracleError("ANTHROPIC_API_KEY not configured")
            import anthropic
            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                timeout=settings.llm_timeout,
            )
        return self._client

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def complete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        """Call Claude synchronously and return the text of the reply."""
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens or settings.llm_max_tokens,
            messages=[
                {"role": "user", "content": prompt}
            ],
        )

        if getattr(response, "stop_reason", None) == "refusal":
            raise ClaudeOracleError("model refused the request")
        if not response.content:
            raise ClaudeOracleError("empty response")

        text = response.content[0].text.strip()
        if not text:
            raise ClaudeOracleError("empty response")
        return text

    async def acomplete(self, prompt: str, max_tokens: Optional[int] = None) -> str:
        return await asyncio.to_thread(self.complete, prompt, max_tokens)


class ClaudeExtractionOracle(ExtractionOracle):
    """Extract funded companies from newsletter text with Claude."""

    name = "claude-extraction"

    EXTRACTION_PROMPT = """You extract company information from newsletter text.

Extract every company mentioned with a funding event from the newsletter below and
return ONLY a valid JSON array. Each object must have exactly these properties:
- company: Company name
- round: Funding round (e.g. "Series A", "Seed", "Series B")
- amount: Funding amount with currency (e.g. "$5M", "€2M", "$250K")
- sector: Industry/sector the company operates in
- HQ: Company headquarters location (city, country)
- snippet: Brief description of the company (max 200 chars)

Newsletter text:
---
{newsletter_text}
---

Example format:
[
  {{
    "company": "TechCorp",
    "round": "Series A",
    "amount": "$5M",
    "sector": "FinTech",
    "HQ": "San Francisco, USA",
    "snippet": "AI-powered financial analytics platform for small businesses"
  }}
]

Return only the JSON array, no other text."""

    def __init__(self, claude: Optional[ClaudeClient] = None, max_text_length: int = 30000):
        self.claude = claude or ClaudeClient()
        self.max_text_length = max_text_length

    async def extract(self, newsletter_text: str) -> OracleResult[list[Company]]:
        """Extract companies, reporting any failure as an OracleResult."""
        if not self.claude.available:
            return OracleResult.failure(self.name, "ANTHROPIC_API_KEY not configured")

        if len(newsletter_text) > self.max_text_length:
            newsletter_text = newsletter_text[:self.max_text_length] + "...[truncated]"

        prompt = self.EXTRACTION_PROMPT.format(newsletter_text=newsletter_text)

        try:
            text = await self.claude.acomplete(prompt)
            companies = parse_extraction_response(text)
        except ClaudeOracleError as e:
            return OracleResult.failure(self.name, str(e))
        except Exception as e:
            logger.error(f"Claude API call failed: {e}")
            return OracleResult.failure(self.name, f"API call failed: {e}")

        return OracleResult.success(companies)


class ClaudeOutreachOracle(OutreachOracle):
    """Write two-line outreach messages with Claude."""

    name = "claude-outreach"

    OUTREACH_PROMPT = """You are a sales development representative writing personalized outreach.

Write a 2-line outreach message for this company, based on its profile and how it matches
our Ideal Customer Profile.

Company:
- Name: {name}
- Sector: {sector}
- Funding round: {round}
- Funding amount: {amount}
- Headquarters: {headquarters}
- Description: {snippet}
- ICP score: {score:.2f}

Our target profile:
- Industries: {industries}
- Stages: {stages}
- Geography: {geographies}
- Tech focus: {tech_hints}

Instructions:
1. First line: acknowledge their recent funding and mention something specific about the company.
2. Second line: connect how {sender} could help them scale or solve a relevant challenge.
3. Be conversational, not salesy, and stay under 50 words.
4. Avoid generic openers such as "I hope this email finds you well".

Return only the 2-line message."""

    def __init__(self, claude: Optional[ClaudeClient] = None, sender: Optional[str] = None):
        self.claude = claude or ClaudeClient()
        self.sender = sender or settings.sender_name

    def build_prompt(self, company: Company, icp: ICP) -> str:
        return self.OUTREACH_PROMPT.format(
            name=company.name,
            sector=company.sector,
            round=company.round,
            amount=company.amount,
            headquarters=company.headquarters,
            snippet=company.snippet,
            score=company.icp_score,
            industries=", ".join(icp.industries),
            stages=", ".join(icp.stages),
            geographies=", ".join(icp.geographies),
            tech_hints=", ".join(icp.tech_hints),
            sender=self.sender,
        )

    async def generate(self, company: Company, icp: ICP) -> OracleResult[str]:
        if not self.claude.available:
            return OracleResult.failure(self.name, "ANTHROPIC_API_KEY not configured")

        try:
            text = await self.claude.acomplete(self.build_prompt(company, icp), max_tokens=300)
        except ClaudeOracleError as e:
            return OracleResult.failure(self.name, str(e))
        except Exception as e:
            logger.error(f"Claude API call failed for {company.name}: {e}")
            return OracleResult.failure(self.name, f"API call failed: {e}")

        return OracleResult.success(text)


class ClaudeScoreEnhancer(ScoreEnhancer):
    """Ask Claude for a refined ICP score, clamped to [0, 1]."""

    name = "claude-score-enhancer"

    SCORING_PROMPT = """Rate how well this company matches our Ideal Customer Profile.

Company: {name}
Sector: {sector}
Funding: {round} {amount}
Headquarters: {headquarters}
Headcount: {headcount}
Description: {snippet}

Profile:
{icp_json}

A rule-based scorer gave this company {score:.2f} on a 0-1 scale.
Reply with a single number between 0 and 1 and nothing else."""

    NUMBER_PATTERN = re.compile(r"-?\d+(?:\.\d+)?")

    def __init__(self, claude: Optional[ClaudeClient] = None):
        self.claude = claude or ClaudeClient()

    async def enhance(self, company: Company, icp: ICP) -> OracleResult[float]:
        if not self.claude.available:
            return OracleResult.failure(self.name, "ANTHROPIC_API_KEY not configured")

        prompt = self.SCORING_PROMPT.format(
            name=company.name,
            sector=company.sector,
            round=company.round,
            amount=company.amount,
            headquarters=company.headquarters,
            headcount=company.headcount if company.headcount is not None else "unknown",
            snippet=company.snippet,
            icp_json=json.dumps(icp.to_config(), indent=2),
            score=company.icp_score,
        )

        try:
            text = await self.claude.acomplete(prompt, max_tokens=20)
        except ClaudeOracleError as e:
            return OracleResult.failure(self.name, str(e))
        except Exception as e:
            logger.error(f"Claude API call failed for {company.name}: {e}")
            return OracleResult.failure(self.name, f"API call failed: {e}")

        match = self.NUMBER_PATTERN.search(text)
        if not match:
            return OracleResult.failure(self.name, f"unparsable score: {text!r}")

        return OracleResult.success(min(max(float(match.group()), 0.0), 1.0))
