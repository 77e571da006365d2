"""Scoring engine for ranking leads against the ICP."""

from .amounts import parse_funding_amount
from .scorer import ICPScorer

__all__ = ["ICPScorer", "parse_funding_amount"]
