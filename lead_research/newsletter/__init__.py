"""Newsletter loading and text extraction."""

from .extractor import NewsletterExtractor
from .reader import SAMPLE_NEWSLETTER, Newsletter, content_hash, load_newsletters, read_newsletter

__all__ = [
    "NewsletterExtractor",
    "Newsletter",
    "SAMPLE_NEWSLETTER",
    "content_hash",
    "load_newsletters",
    "read_newsletter",
]
