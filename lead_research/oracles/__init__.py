"""Language-model oracles and their deterministic fallbacks."""

from .base import (
    ExtractionOracle,
    OracleError,
    OracleResult,
    OutreachOracle,
    ScoreEnhancer,
)
from .claude import (
    ClaudeClient,
    ClaudeExtractionOracle,
    ClaudeOutreachOracle,
    ClaudeScoreEnhancer,
)
from .fallback import (
    DemoExtractionOracle,
    TemplateOutreachOracle,
    demo_companies,
    template_outreach_message,
)

__all__ = [
    "ExtractionOracle",
    "OutreachOracle",
    "ScoreEnhancer",
    "OracleError",
    "OracleResult",
    "ClaudeClient",
    "ClaudeExtractionOracle",
    "ClaudeOutreachOracle",
    "ClaudeScoreEnhancer",
    "DemoExtractionOracle",
    "TemplateOutreachOracle",
    "demo_companies",
    "template_outreach_message",
]
