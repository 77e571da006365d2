"""Enrichment of extracted companies from reference data."""

from .index import EnrichmentIndex
from .matching import normalize_company_name

__all__ = ["EnrichmentIndex", "normalize_company_name"]
