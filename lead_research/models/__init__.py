"""Data models for the Lead Research Agent."""

from .company import Company
from .enrichment import EnrichmentRecord
from .icp import ICP, ICPConfigError, SizeRange, load_icp

__all__ = [
    "Company",
    "EnrichmentRecord",
    "ICP",
    "ICPConfigError",
    "SizeRange",
    "load_icp",
]
