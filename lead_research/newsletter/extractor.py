"""Newsletter HTML to text conversion."""

import logging
import re

from bs4 import BeautifulSoup, Comment

logger = logging.getLogger(__name__)


class NewsletterExtractor:
    """Extract readable text from newsletter email bodies."""

    # Tags to remove entirely
    REMOVE_TAGS = ["script", "style", "noscript", "iframe", "svg", "head", "form"]

    # Tags that end a line of text
    BLOCK_TAGS = [
        "br", "p", "div", "tr", "table", "li", "ul", "ol",
        "h1", "h2", "h3", "h4", "h5", "h6", "blockquote",
    ]

    # Typical newsletter footer content
    FOOTER_PATTERNS = [
        r"unsubscribe", r"manage (your )?preferences", r"view (this email )?in (your )?browser",
    ]

    HTML_MARKERS = re.compile(r"<\s*(html|body|div|p|table|br|span|a)\b", re.I)

    def is_html(self, content: str) -> bool:
        return bool(self.HTML_MARKERS.search(content or ""))

    def extract(self, content: str) -> str:
        """Return plain text for an HTML or plain-text newsletter body."""
        if not content:
            return ""

        if not self.is_html(content):
            return self._clean_text(content)

        soup = BeautifulSoup(content, "lxml")

        # Remove unwanted tags
        for tag in self.REMOVE_TAGS:
            for element in soup.find_all(tag):
                element.decompose()

        # Remove comments
        for comment in soup.find_all(string=lambda t: isinstance(t, Comment)):
            comment.extract()

        body = soup.find("body") or soup
        text = self._extract_text(body)
        text = self._clean_text(text)
        return self._strip_footer(text)

    def _extract_text(self, element) -> str:
        """Extract text from an element, breaking lines at block tags."""
        texts = []

        for descendant in element.descendants:
            if isinstance(descendant, str):
                text = descendant.strip()
                if text:
                    texts.append(text)
            elif descendant.name in self.BLOCK_TAGS:
                texts.append("\n")

        return " ".join(texts)

    def _clean_text(self, text: str) -> str:
        """Clean up extracted text."""
        # Normalize whitespace but keep line breaks
        text = re.sub(r"[ \t\r\f\v\xa0]+", " ", text)

        # Fix newlines
        text = re.sub(r" *\n *", "\n", text)
        text = re.sub(r"\n{3,}", "\n\n", text)

        return text.strip()

    def _strip_footer(self, text: str) -> str:
        """Drop trailing lines that are unsubscribe or browser links."""
        lines = text.split("\n")
        while lines and any(re.search(p, lines[-1], re.I) for p in self.FOOTER_PATTERNS):
            lines.pop()
        return "\n".join(lines).strip()
