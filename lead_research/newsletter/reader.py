"""Load newsletters from files and directories."""

import email
import hashlib
import logging
from dataclasses import dataclass
from email import policy
from pathlib import Path
from typing import Iterable, Optional, Union

from .extractor import NewsletterExtractor

logger = logging.getLogger(__name__)

NEWSLETTER_SUFFIXES = (".txt", ".html", ".htm", ".eml")

SAMPLE_NEWSLETTER = """Pulse of the Valley - Weekly Funding Roundup

TechFlow Analytics, a San Francisco fintech startup, raised an $8M Series A to expand its
AI-powered financial analytics platform that helps banks automate risk assessment and fraud detection.

London-based DataVision Corp closed a $15M Series B for its real-time business intelligence
platform using machine learning for predictive analytics in financial services.

CloudSync Solutions (Berlin) announced a $4.5M seed round for cloud-based payment orchestration
with a single API for multiple payment providers.

Munich's AutoInsights raised $6M in Series A funding for AI-powered analytics that help
automotive manufacturers optimize supply chains and predict maintenance.

Amsterdam cybersecurity company SecureBank secured a $25M Series B to protect financial
institutions from advanced persistent threats using machine learning.

InvestorPro, from Stockholm, raised a $7M seed round for portfolio management SaaS tools
for independent financial advisors.

Copenhagen's TradingBot raised $3.2M pre-Series A for an AI algorithmic trading platform for
retail investors.
"""


@dataclass(frozen=True)
class Newsletter:
    """A newsletter body reduced to plain text."""

    source: str
    text: str

    @property
    def content_hash(self) -> str:
        return content_hash(self.text)


def content_hash(text: str) -> str:
    """Stable identifier of newsletter content."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _email_body(raw: str) -> str:
    """Pick the HTML (or else plain text) body of an .eml message."""
    message = email.message_from_string(raw, policy=policy.default)
    part = message.get_body(preferencelist=("html", "plain"))
    if part is None:
        return ""
    return part.get_content()


def read_newsletter(path: Union[str, Path], extractor: Optional[NewsletterExtractor] = None) -> Newsletter:
    """Read one newsletter file as plain text."""
    path = Path(path)
    extractor = extractor or NewsletterExtractor()

    raw = path.read_text(encoding="utf-8", errors="replace")
    if path.suffix.lower() == ".eml":
        raw = _email_body(raw)

    return Newsletter(source=str(path), text=extractor.extract(raw))


def load_newsletters(paths: Iterable[Union[str, Path]]) -> list[Newsletter]:
    """Read newsletters from files and directories.

    Directories contribute their newsletter files in sorted order. Unreadable
    files and empty bodies are skipped with a warning.
    """
    extractor = NewsletterExtractor()
    files: list[Path] = []

    for path in map(Path, paths):
        if path.is_dir():
            files.extend(
                sorted(p for p in path.iterdir() if p.suffix.lower() in NEWSLETTER_SUFFIXES)
            )
        elif path.exists():
            files.append(path)
        else:
            logger.warning(f"Newsletter not found: {path}")

    newsletters = []
    for file in files:
        try:
            newsletter = read_newsletter(file, extractor)
        except OSError as e:
            logger.warning(f"Failed to read newsletter {file}: {e}")
            continue

        if not newsletter.text:
            logger.warning(f"Newsletter {file} has no text content")
            continue
        newsletters.append(newsletter)

    logger.info(f"Loaded {len(newsletters)} newsletters")
    return newsletters
