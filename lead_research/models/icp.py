"""Ideal Customer Profile schema."""

import json
import logging
from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class ICPConfigError(ValueError):
    """Raised when the ICP configuration cannot be loaded."""


class SizeRange(BaseModel):
    """Employee-count and funding-amount targets."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    min_employees: int = Field(default=0, description="Minimum employee count")
    max_employees: int = Field(default=0, description="Maximum employee count, 0 disables the check")
    funding_min: str = Field(default="", description="Minimum funding amount, e.g. '$1M'")
    funding_max: str = Field(default="", description="Maximum funding amount, empty means unbounded")

    @field_validator("funding_min", "funding_max", mode="before")
    @classmethod
    def _amount_to_str(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ICP(BaseModel):
    """Declarative target-customer profile.

    Each list behaves as a set: blank entries are dropped and duplicates
    collapsed (first occurrence kept). An empty list disables the matching
    sub-score. A repeated tech hint therefore counts once in the tech-hint
    fraction.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    industries: tuple[str, ...] = Field(default=(), alias="industry")
    stages: tuple[str, ...] = Field(default=(), alias="stage")
    geographies: tuple[str, ...] = Field(default=(), alias="geo")
    tech_hints: tuple[str, ...] = Field(default=(), alias="tech_hints")
    size: SizeRange = Field(default_factory=SizeRange)

    @field_validator("industries", "stages", "geographies", "tech_hints", mode="before")
    @classmethod
    def _as_unique_terms(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        terms = []
        for item in value:
            if not isinstance(item, str):
                continue
            item = item.strip()
            if item and item not in terms:
                terms.append(item)
        return tuple(terms)

    def to_config(self) -> dict:
        """Serialize back to the JSON configuration shape."""
        return {
            "industry": list(self.industries),
            "stage": list(self.stages),
            "size": self.size.model_dump(),
            "geo": list(self.geographies),
            "tech_hints": list(self.tech_hints),
        }


def load_icp(path: Union[str, Path]) -> ICP:
    """Load the ICP from a JSON file.

    Raises:
        ICPConfigError: if the file is missing, is not valid JSON, or does not
            match the ICP schema.
    """
    path = Path(path)
    if not path.exists():
        raise ICPConfigError(f"ICP file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ICPConfigError(f"Failed to read ICP file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ICPConfigError(f"ICP file {path} must contain a JSON object")

    try:
        icp = ICP.model_validate(data)
    except ValidationError as e:
        raise ICPConfigError(f"Invalid ICP in {path}: {e}") from e

    logger.info(
        f"Loaded ICP from {path}: {len(icp.industries)} industries, "
        f"{len(icp.stages)} stages, {len(icp.geographies)} geographies, "
        f"{len(icp.tech_hints)} tech hints"
    )
    return icp
