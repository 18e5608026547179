"""
Citation extraction for Brand Visibility.

Finds every URL an LLM answer cites, in order of appearance, in three passes:

1. Markdown links: [label](url), keeping the full URL with path and query
2. Bare URLs: http(s):// and www. URLs, matched up to whitespace so paths
   are never truncated at "/" or "-"
3. Bare domains: "ycombinator.com/apply" without scheme or "www.", limited to
   common TLDs so file names ("README.md") and versions ("v3.5") are skipped

Spans found by earlier passes are masked before the next pass so a URL is
not extracted twice. URLs are cleaned (trailing punctuation, unbalanced closing
parenthesis, missing scheme) and deduplicated by cleaned URL.

Extraction is purely syntactic: URLs are never fetched.
"""

import logging
import re

from brand_visibility.extractor.text_normalizer import (
    BARE_URL_PATTERN,
    MARKDOWN_LINK_PATTERN,
)
from brand_visibility.models import Citation
from brand_visibility.utils.urls import is_valid_host, normalize_host

logger = logging.getLogger(__name__)

_TRAILING_PUNCTUATION = ".,;:!?'\"]}*_>"

BARE_DOMAIN_TLDS = (
    "com", "org", "net", "io", "co", "ai", "dev", "app", "edu", "gov", "info",
    "biz", "uk", "de", "fr", "ca", "au", "vc", "tech",
)

# Not preceded by characters that would make it part of an email, path or
# longer host; the TLD must end the host
BARE_DOMAIN_PATTERN = re.compile(
    r"(?<![\w@./-])(?:[a-z0-9](?:[a-z0-9-]*[a-z0-9])?\.)+"
    r"(?:" + "|".join(BARE_DOMAIN_TLDS) + r")(?![\w-])"
    r"(?:/[^\s<>\"'{}|\\^`\[\]]*)?",
    re.IGNORECASE,
)

_SCHEME_PATTERN = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def clean_url(url: str) -> str | None:
    """
    Clean a raw URL captured from answer text.

    - Strips surrounding whitespace and trailing sentence punctuation
    - Drops a trailing ")" that has no matching "(" in the URL
    - Adds "https://" to scheme-less URLs ("www.", bare domains)

    Args:
        url: Raw URL text

    Returns:
        Cleaned URL, or None for empty/non-string input

    Example:
        >>> clean_url("https://example.com/guide).")
        'https://example.com/guide'
        >>> clean_url("https://en.wikipedia.org/wiki/Chase_(bank)")
        'https://en.wikipedia.org/wiki/Chase_(bank)'
        >>> clean_url("www.ycombinator.com/companies,")
        'https://www.ycombinator.com/companies'
        >>> clean_url("ycombinator.com/apply.")
        'https://ycombinator.com/apply'
    """
    if not isinstance(url, str):
        return None

    cleaned = url.strip()
    while cleaned:
        if cleaned[-1] in _TRAILING_PUNCTUATION:
            cleaned = cleaned[:-1]
        elif cleaned.endswith(")") and cleaned.count(")") > cleaned.count("("):
            cleaned = cleaned[:-1]
        else:
            break

    if not cleaned:
        return None

    if not _SCHEME_PATTERN.match(cleaned):
        cleaned = "https://" + cleaned

    return cleaned


def is_valid_url(url: str | None) -> bool:
    """
    Check that a cleaned URL has a resolvable, public-looking host.

    Example:
        >>> is_valid_url("https://ycombinator.com/apply")
        True
        >>> is_valid_url("http://localhost:3000/")
        False
    """
    return is_valid_host(normalize_host(url))


def _make_citation(
    raw_url: str,
    source: str,
    label: str | None,
    seen: set[str],
) -> Citation | None:
    """Clean, validate and deduplicate one captured URL."""
    cleaned = clean_url(raw_url)
    if cleaned is None or not is_valid_url(cleaned):
        logger.debug("Discarding invalid URL", extra={"context": {"url": raw_url}})
        return None

    if cleaned in seen:
        return None
    seen.add(cleaned)

    return Citation(
        url=raw_url,
        cleaned_url=cleaned,
        label=label,
        source=source,
        host=normalize_host(cleaned),
    )


def extract_citations(raw_text: str) -> list[Citation]:
    """
    Extract all cited URLs from raw answer text.

    Args:
        raw_text: Raw LLM answer (before normalization)

    Returns:
        Citations in order of appearance, unclassified (type "earned"),
        deduplicated by cleaned URL with the first occurrence kept.
        Empty list for non-string or URL-free text.

    Example:
        >>> text = (
        ...     "Apply via [YC](https://www.ycombinator.com/apply?batch=w25). "
        ...     "See https://www.crunchbase.com/lists/accelerators/y-combinator."
        ... )
        >>> [c.cleaned_url for c in extract_citations(text)]
        ['https://www.ycombinator.com/apply?batch=w25', 'https://www.crunchbase.com/lists/accelerators/y-combinator']
    """
    if not isinstance(raw_text, str) or not raw_text:
        return []

    # (offset, raw_url, source, label)
    captured: list[tuple[int, str, str, str | None]] = []

    # Pass 1: markdown links
    masked = list(raw_text)
    for match in MARKDOWN_LINK_PATTERN.finditer(raw_text):
        label = match.group(1).strip() or None
        captured.append((match.start(), match.group(2), "markdown", label))
        start, end = match.span()
        masked[start:end] = " " * (end - start)

    # Pass 2: bare URLs outside markdown links
    for match in BARE_URL_PATTERN.finditer("".join(masked)):
        captured.append((match.start(), match.group(0), "bare", None))
        start, end = match.span()
        masked[start:end] = " " * (end - start)

    # Pass 3: scheme-less domains outside links and URLs
    for match in BARE_DOMAIN_PATTERN.finditer("".join(masked)):
        captured.append((match.start(), match.group(0), "bare", None))

    captured.sort(key=lambda item: item[0])

    citations = []
    seen: set[str] = set()
    for _offset, raw_url, source, label in captured:
        citation = _make_citation(raw_url, source, label, seen)
        if citation is not None:
            citations.append(citation)

    return citations
