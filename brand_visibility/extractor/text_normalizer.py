"""
Text normalization for brand matching.

Turns raw LLM markdown into a flat, lowercase, single-spaced string in which
"Chase.", "**Chase**" and "chase" all read the same, so brand matching only
has to deal with word boundaries.

Key features:
- Markdown stripping (emphasis, code ticks, headings, list and quote markers,
  [label](url) link syntax)
- Edge punctuation removal per word, keeping internal punctuation
  ("warmly.io", "g-suite", "at&t")
- Name symbols survive at word edges: trailing "+" and "#" ("c++", "c#")
  and a single leading "." before a letter or digit (".net")
- Embedded URLs pass through verbatim (no lowercasing, no stripping)
- Never raises: non-string input normalizes to ""

The link and URL patterns defined here are shared with the citation
extractor so both passes agree on what a link is.
"""

import re
import string

# [label](url) with at most one level of balanced parentheses inside the URL
MARKDOWN_LINK_PATTERN = re.compile(
    r"\[([^\]\n]*)\]\(\s*"
    r"((?:https?://|www\.)(?:[^\s()<>]|\([^\s()<>]*\))+)"
    r"\s*\)",
    re.IGNORECASE,
)

# Bare URLs: stop only at whitespace and characters that never occur in URLs,
# so paths and query strings are kept whole
BARE_URL_PATTERN = re.compile(
    r"(?:https?://|www\.)[^\s<>\"'{}|\\^`\[\]]+",
    re.IGNORECASE,
)

_HEADING_PATTERN = re.compile(r"^[ \t]*#{1,6}[ \t]*", re.MULTILINE)
_LIST_MARKER_PATTERN = re.compile(r"^[ \t]*(?:[-*+•]|\d+[.)])[ \t]+", re.MULTILINE)
_QUOTE_MARKER_PATTERN = re.compile(r"^[ \t]*>+[ \t]?", re.MULTILINE)
_EMPHASIS_PATTERN = re.compile(r"\*\*|__|~~|`+")
_SENTENCE_BOUNDARY_PATTERN = re.compile(r"(?<=[.!?])\s+")

_EDGE_PUNCTUATION = string.punctuation + "“”‘’«»…–—•·"
# "+" and "#" end names such as C++ and C#
_TRAILING_PUNCTUATION = _EDGE_PUNCTUATION.replace("+", "").replace("#", "")


def _strip_edges(token: str) -> str:
    """
    Strip edge punctuation from one lowercase token.

    A single leading "." directly before a letter or digit is kept, so
    ".net" stays distinct from "net" while "...and" becomes "and".
    """
    word = token.rstrip(_TRAILING_PUNCTUATION)
    stripped = word.lstrip(_EDGE_PUNCTUATION)
    cut = len(word) - len(stripped)
    if (
        cut
        and word[cut - 1] == "."
        and (cut == 1 or word[cut - 2] != ".")
        and stripped[:1].isalnum()
    ):
        return "." + stripped
    return stripped


def _normalize_plain(segment: str) -> list[str]:
    """Lowercase a URL-free segment and strip edge punctuation per word."""
    segment = _EMPHASIS_PATTERN.sub(" ", segment.lower())
    words = []
    for token in segment.split():
        word = _strip_edges(token)
        if word:
            words.append(word)
    return words


def normalize(text: str) -> str:
    """
    Normalize LLM answer text for brand matching.

    Args:
        text: Raw answer text (markdown allowed)

    Returns:
        Lowercase, single-spaced text without markdown syntax or edge
        punctuation. URLs are kept exactly as written.

    Example:
        >>> normalize("## Top picks\\n1. **Chase.** and [Amex](https://amex.com/Cards)")
        'top picks chase and amex https://amex.com/Cards'
        >>> normalize(None)
        ''
    """
    if not isinstance(text, str) or not text:
        return ""

    text = MARKDOWN_LINK_PATTERN.sub(lambda m: f" {m.group(1)} {m.group(2)} ", text)
    text = _HEADING_PATTERN.sub("", text)
    text = _LIST_MARKER_PATTERN.sub("", text)
    text = _QUOTE_MARKER_PATTERN.sub("", text)

    words: list[str] = []
    cursor = 0
    for match in BARE_URL_PATTERN.finditer(text):
        words.extend(_normalize_plain(text[cursor : match.start()]))
        words.append(match.group(0))
        cursor = match.end()
    words.extend(_normalize_plain(text[cursor:]))

    return " ".join(words)


def tokenize(text: str) -> list[str]:
    """
    Split text into normalized word tokens.

    Example:
        >>> tokenize("Is **Chase** worth it?")
        ['is', 'chase', 'worth', 'it']
    """
    return normalize(text).split()


def strip_urls(text: str) -> str:
    """
    Remove URLs from text before mention matching.

    Markdown links are replaced by their label and bare URLs are removed, so a
    brand name that only appears inside a URL is not counted as a mention.

    Example:
        >>> strip_urls("See [Chase](https://chase.com) or https://amex.com/x")
        'See Chase or '
    """
    if not isinstance(text, str):
        return ""
    text = MARKDOWN_LINK_PATTERN.sub(lambda m: m.group(1), text)
    return BARE_URL_PATTERN.sub("", text)


def split_sentences(text: str) -> list[str]:
    """
    Split text into sentences on ., ! and ? followed by whitespace.

    Dots inside words ("warmly.io", "3.5") do not split.
    """
    if not isinstance(text, str):
        return []
    return [s.strip() for s in _SENTENCE_BOUNDARY_PATTERN.split(text) if s.strip()]


def count_words(text: str) -> int:
    """Count whitespace-separated words in text."""
    if not isinstance(text, str):
        return 0
    return len(text.split())
