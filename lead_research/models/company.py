"""Company lead models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SNIPPET_MAX_LENGTH = 200


class Company(BaseModel):
    """A company mentioned in a newsletter, carried through every pipeline stage.

    Field aliases are the wire keys used by the extraction model and by the
    exported results, so ``Company.model_validate(item)`` accepts an extraction
    item as-is and ``model_dump(by_alias=True)`` produces the export shape.
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    # Extracted fields
    name: str = Field(alias="company", min_length=1, description="Company name, join and dedup key")
    round: str = Field(default="", description="Funding round, e.g. 'Series A'")
    amount: str = Field(default="", description="Funding amount with currency, e.g. '$5M'")
    sector: str = Field(default="", description="Industry label")
    headquarters: str = Field(default="", alias="HQ", description="City, country")
    snippet: str = Field(default="", description="Short description used for keyword matching")

    # Enrichment
    domain: Optional[str] = None
    headcount: Optional[int] = None

    # Scoring and outreach
    icp_score: float = Field(default=0.0, ge=0.0, le=1.0, alias="icpScore")
    outreach_message: str = Field(default="", alias="outreachMessage")

    # Degraded-mode markers
    demo_data: bool = Field(
        default=False,
        alias="demoData",
        description="Record comes from the built-in demo dataset, not the newsletter",
    )
    outreach_fallback: bool = Field(
        default=False,
        alias="outreachFallback",
        description="Outreach message comes from the template generator",
    )

    @field_validator("round", "amount", "sector", "headquarters", "snippet", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None or isinstance(value, bool):
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("snippet")
    @classmethod
    def _truncate_snippet(cls, value: str) -> str:
        return value[:SNIPPET_MAX_LENGTH]

    @property
    def dedup_key(self) -> str:
        """Case-insensitive key used to collapse duplicates across newsletters."""
        from lead_research.enrich.matching import normalize_company_name

        return normalize_company_name(self.name) or self.name.lower()

    def to_export(self) -> dict:
        """Serialize with the wire keys used for downstream consumption."""
        return self.model_dump(by_alias=True)
