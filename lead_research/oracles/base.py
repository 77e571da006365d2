"""Oracle interfaces and call outcomes."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from lead_research.models import Company, ICP

T = TypeVar("T")


@dataclass(frozen=True)
class OracleError:
    """Why an oracle call produced no usable value."""

    oracle: str
    message: str

    def __str__(self) -> str:
        return f"{self.oracle}: {self.message}"


@dataclass(frozen=True)
class OracleResult(Generic[T]):
    """Outcome of an oracle call: either a value or an error, never both."""

    value: Optional[T] = None
    error: Optional[OracleError] = None

    @classmethod
    def success(cls, value: T) -> "OracleResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, oracle: str, message: str) -> "OracleResult[T]":
        return cls(error=OracleError(oracle=oracle, message=message))

    @property
    def ok(self) -> bool:
        return self.error is None


class ExtractionOracle(ABC):
    """Turns newsletter text into candidate companies."""

    name: str = "extraction"

    @abstractmethod
    async def extract(self, newsletter_text: str) -> OracleResult[list[Company]]:
        """
        Extract companies and funding events from newsletter text.

        Args:
            newsletter_text: Plain-text newsletter body

        Returns:
            The extracted companies, or the reason extraction failed
        """
        pass


class OutreachOracle(ABC):
    """Writes a personalized outreach message for a scored company."""

    name: str = "outreach"

    @abstractmethod
    async def generate(self, company: Company, icp: ICP) -> OracleResult[str]:
        """
        Generate outreach text for a company that matched the ICP.

        Args:
            company: The scored company
            icp: The profile it was scored against

        Returns:
            The message text, or the reason generation failed
        """
        pass


class ScoreEnhancer(ABC):
    """Refines a deterministic ICP score."""

    name: str = "score-enhancer"

    @abstractmethod
    async def enhance(self, company: Company, icp: ICP) -> OracleResult[float]:
        """Return a refined score for a company that already has ``icp_score`` set."""
        pass
