"""Scoring engine for matching companies against the ICP."""

import logging
import re

from lead_research.models import Company, ICP
from .amounts import parse_funding_amount

logger = logging.getLogger(__name__)

FULL_MATCH = 1.0
PARTIAL_MATCH = 0.6
NO_MATCH = 0.0
UNKNOWN_SIZE = 0.5

# Near-miss window around a target range
RANGE_LOWER_SLACK = 0.5
RANGE_UPPER_SLACK = 1.5


def contains(text: str, term: str) -> bool:
    """Case-insensitive containment; empty strings never match."""
    if not text or not term:
        return False
    return term.lower() in text.lower()


def score_range(value: float, minimum: float, maximum: float) -> float:
    """1.0 inside [min, max], 0.6 inside the widened window, else 0."""
    if minimum <= value <= maximum:
        return FULL_MATCH
    if minimum * RANGE_LOWER_SLACK <= value <= maximum * RANGE_UPPER_SLACK:
        return PARTIAL_MATCH
    return NO_MATCH


class ICPScorer:
    """Score companies against an Ideal Customer Profile.

    The final score is a plain sum of weighted sub-scores. A sub-score whose
    ICP field is empty is left out entirely, and the weights are not
    renormalized, so a sparse ICP caps the attainable score below 1.0. Size is
    always scored.
    """

    WEIGHTS = {
        "industry": 0.25,
        "stage": 0.20,
        "geography": 0.15,
        "size": 0.20,
        "tech": 0.20,
    }

    def score(self, company: Company, icp: ICP) -> float:
        """Score a company against the ICP, in [0, 1]."""
        breakdown = self.breakdown(company, icp)
        total = sum(
            sub_score * self.WEIGHTS[criterion]
            for criterion, sub_score in breakdown.items()
        )
        return min(max(total, 0.0), 1.0)

    def breakdown(self, company: Company, icp: ICP) -> dict[str, float]:
        """Unweighted sub-score per enabled criterion."""
        scores = {}

        if icp.industries:
            scores["industry"] = self._score_industry(company.sector, icp)

        if icp.stages:
            scores["stage"] = self._score_any_term(company.round, icp.stages)

        if icp.geographies:
            scores["geography"] = self._score_any_term(company.headquarters, icp.geographies)

        scores["size"] = self._score_size(company, icp)

        if icp.tech_hints:
            scores["tech"] = self._score_tech_hints(company.snippet, icp)

        logger.debug(f"Score breakdown for {company.name}: {scores}")
        return scores

    def score_and_rank(self, companies: list[Company], icp: ICP) -> list[Company]:
        """Score every company in place and return them best first."""
        for company in companies:
            company.icp_score = self.score(company, icp)
        return sorted(companies, key=lambda c: c.icp_score, reverse=True)

    def _score_industry(self, sector: str, icp: ICP) -> float:
        """Score industry match."""
        if not sector:
            return NO_MATCH

        for industry in icp.industries:
            if contains(sector, industry) or contains(industry, sector):
                return FULL_MATCH

        # Partial credit for any significant word of a target industry
        for industry in icp.industries:
            for keyword in re.split(r"[ \-&]", industry):
                if len(keyword) > 2 and contains(sector, keyword):
                    return PARTIAL_MATCH

        return NO_MATCH

    def _score_any_term(self, value: str, terms: tuple[str, ...]) -> float:
        """Full credit if the value mentions any target term."""
        if any(contains(value, term) for term in terms):
            return FULL_MATCH
        return NO_MATCH

    def _score_size(self, company: Company, icp: ICP) -> float:
        """Average of the employee and funding factors that can be computed."""
        size = icp.size
        factors = []

        if company.headcount is not None and size.max_employees > 0:
            factors.append(
                score_range(company.headcount, size.min_employees, size.max_employees)
            )

        if company.amount and size.funding_min:
            factors.append(self._score_funding(company.amount, icp))

        if not factors:
            return UNKNOWN_SIZE

        return sum(factors) / len(factors)

    def _score_funding(self, amount: str, icp: ICP) -> float:
        """Score a funding amount against the ICP funding range."""
        value = parse_funding_amount(amount)
        minimum = parse_funding_amount(icp.size.funding_min)
        maximum = (
            parse_funding_amount(icp.size.funding_max)
            if icp.size.funding_max
            else float("inf")
        )
        return score_range(value, minimum, maximum)

    def _score_tech_hints(self, snippet: str, icp: ICP) -> float:
        """Fraction of tech hints mentioned in the snippet."""
        if not snippet:
            return NO_MATCH

        matches = sum(1 for hint in icp.tech_hints if contains(snippet, hint))
        return matches / len(icp.tech_hints)
