"""Reference data used to enrich extracted companies."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class EnrichmentRecord(BaseModel):
    """One row of the enrichment table."""

    model_config = ConfigDict(frozen=True)

    company_name: str = Field(description="Company name as stored in the table")
    domain: str = Field(default="", description="Company website domain")
    headcount: Optional[int] = Field(default=None, description="Employee count, if known")
