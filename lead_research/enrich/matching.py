"""Company-name normalization and match predicates."""

import re

# Legal-form tokens dropped during normalization
LEGAL_SUFFIXES = frozenset({"inc", "inc.", "ltd", "ltd.", "llc", "corp", "corp.", "co."})
LEGAL_SUFFIX_STEMS = frozenset(s.rstrip(".") for s in LEGAL_SUFFIXES)

MIN_SIGNIFICANT_WORD_LENGTH = 3
WORD_OVERLAP_THRESHOLD = 0.5


def normalize_company_name(name: str) -> str:
    """Reduce a company name to a canonical form for comparison.

    >>> normalize_company_name("Acme-Data, Inc.")
    'acme data'
    >>> normalize_company_name("Smith & Sons Co.")
    'smith and sons'
    >>> normalize_company_name("Acme Co.Ltd")
    'acme'
    """
    if not name:
        return ""

    name = name.lower().replace("&", " and ")
    name = re.sub(r"[-,]", " ", name)

    tokens = []
    for token in name.split():
        if token in LEGAL_SUFFIXES:
            continue
        token = _strip_attached_suffixes(token).replace(".", "")
        if token:
            tokens.append(token)

    return " ".join(tokens)


def _strip_attached_suffixes(token: str) -> str:
    """Drop legal suffixes joined to a word by periods, as in 'foo.inc'."""
    parts = [part for part in token.split(".") if part]
    if len(parts) < 2:
        return token
    while len(parts) > 1 and parts[-1] in LEGAL_SUFFIX_STEMS:
        parts.pop()
    if parts[-1] in LEGAL_SUFFIX_STEMS:
        return ""
    return ".".join(parts)


def names_exact_match(name1: str, name2: str) -> bool:
    """Case-insensitive equality of raw names."""
    if not name1 or not name2:
        return False
    return name1.strip().lower() == name2.strip().lower()


def names_contain(normalized1: str, normalized2: str) -> bool:
    """Either normalized name contains the other."""
    if not normalized1 or not normalized2:
        return False
    return normalized1 in normalized2 or normalized2 in normalized1


def word_overlap_ratio(normalized1: str, normalized2: str) -> float:
    """Share of significant words two normalized names have in common.

    Only distinct words of three or more characters count as overlap; the
    denominator is the word count of the shorter name.
    """
    words1 = normalized1.split()
    words2 = normalized2.split()
    if not words1 or not words2:
        return 0.0

    shared = {
        word for word in set(words1) & set(words2)
        if len(word) >= MIN_SIGNIFICANT_WORD_LENGTH
    }
    return len(shared) / min(len(words1), len(words2))


def names_overlap(normalized1: str, normalized2: str) -> bool:
    """At least half of the shorter name's words are shared significant words."""
    ratio = word_overlap_ratio(normalized1, normalized2)
    return ratio > 0 and ratio >= WORD_OVERLAP_THRESHOLD
