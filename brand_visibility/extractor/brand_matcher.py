"""
Brand mention matching for Brand Visibility.

This module finds which tracked brands a normalized LLM answer mentions, in
what order they first appear and how often they appear.

Key features:
- Word-boundary matching ("Chase" never matches inside "purchased")
- Case-insensitive detection over primary names, aliases and derived name
  variations ("Stripe, Inc." is also found as "Stripe")
- Longest-alias-first matching with span claiming, so "JPMorgan Chase" is
  reported once and the "Chase" inside it is not double counted
- One Mention per brand at its first occurrence, carrying the number of
  non-overlapping occurrences; 1-based positions by first occurrence
- Optional fuzzy matching for typos (rapidfuzz)

Security:
- Always uses re.escape() to prevent regex injection

Input text is expected to be the output of text_normalizer.normalize();
aliases are normalized the same way before patterns are built.
"""

import logging
import re
from typing import Any

from rapidfuzz import fuzz

from brand_visibility.extractor.text_normalizer import normalize
from brand_visibility.models import Brand, Mention, coerce_brands

logger = logging.getLogger(__name__)

# Aliases shorter than this are too ambiguous to fuzzy match
MIN_FUZZY_ALIAS_LENGTH = 4

# Trailing words dropped when deriving name variations ("Stripe, Inc.")
CORPORATE_SUFFIXES = frozenset(
    {
        "inc",
        "incorporated",
        "corp",
        "corporation",
        "co",
        "company",
        "ltd",
        "limited",
        "llc",
        "plc",
        "gmbh",
        "group",
        "holdings",
    }
)
LEADING_ARTICLES = frozenset({"the"})
MIN_VARIATION_LENGTH = 3

# Characters that carry meaning inside a brand name. An alias that loses one
# of them to normalization would match unrelated words ("@home" -> "home").
NAME_SYMBOLS = "+#@&$%=~^|<>/\\*"

# Priority of explicit names over derived variations at equal length
_EXPLICIT = 0
_VARIATION = 1

_WORD_PATTERN = re.compile(r"\S+")


def create_brand_pattern(alias: str) -> re.Pattern:
    """
    Create word-boundary regex pattern for brand alias matching.

    CRITICAL: Boundaries prevent false positives.
    - "chase" matches in "we banked with chase"
    - "chase" does NOT match in "we purchased it"

    Boundaries are "no word character on either side" rather than \\b, so
    aliases keep matching when they start or end with a non-word character
    ("c++", ".net").

    Args:
        alias: Brand name or alias (normalized internally)

    Returns:
        Compiled case-insensitive pattern

    Raises:
        ValueError: If alias is empty after normalization

    Example:
        >>> pattern = create_brand_pattern("Chase")
        >>> bool(pattern.search("we purchased from chase"))
        True
        >>> bool(pattern.search("we purchased it"))
        False
    """
    normalized = normalize(alias)
    if not normalized:
        raise ValueError("Brand alias cannot be empty or whitespace")

    # SECURITY: Escape special regex characters before adding boundaries
    escaped = re.escape(normalized)

    return re.compile(r"(?<!\w)" + escaped + r"(?!\w)", re.IGNORECASE)


def loses_name_symbols(alias: str) -> bool:
    """
    Return True if normalizing alias drops a symbol that is part of the name.

    Such an alias cannot be matched faithfully against normalized text.

    Example:
        >>> loses_name_symbols("AT&T"), loses_name_symbols("@Home")
        (False, True)
    """
    normalized = normalize(alias)
    return any(normalized.count(ch) < alias.count(ch) for ch in set(alias) & set(NAME_SYMBOLS))


def brand_variations(name: str) -> list[str]:
    """
    Derive normalized variations of a brand name.

    Trailing corporate suffixes are dropped one at a time, then a leading
    article. A variation is never reduced to nothing and is at least
    MIN_VARIATION_LENGTH characters long.

    Example:
        >>> brand_variations("Stripe, Inc.")
        ['stripe']
        >>> brand_variations("The Coca-Cola Company")
        ['the coca-cola', 'coca-cola']
    """
    words = normalize(name).split()
    variations = []

    while len(words) > 1 and words[-1] in CORPORATE_SUFFIXES:
        words = words[:-1]
        variations.append(" ".join(words))

    if len(words) > 1 and words[0] in LEADING_ARTICLES:
        variations.append(" ".join(words[1:]))

    return [v for v in variations if len(v) >= MIN_VARIATION_LENGTH]


def _overlaps(start: int, end: int, spans: list[tuple[int, int]]) -> bool:
    """Return True if [start, end) intersects any claimed span."""
    return any(start < span_end and end > span_start for span_start, span_end in spans)


def _build_alias_table(
    brands: list[Brand], name_variations: bool = True
) -> list[tuple[str, int, int, re.Pattern]]:
    """
    Build (normalized_alias, priority, brand_index, pattern) entries.

    Longest alias first. At equal length explicit names beat variations,
    then brand-list order decides, so the earlier brand claims a shared alias.
    """
    table = []
    for index, brand in enumerate(brands):
        explicit: set[str] = set()
        for name in brand.all_names():
            normalized = normalize(name)
            if not normalized:
                continue
            if loses_name_symbols(name):
                logger.debug(
                    "Skipping alias that loses symbols when normalized",
                    extra={"context": {"brand": brand.name, "alias": name}},
                )
                continue
            explicit.add(normalized)
            table.append((normalized, _EXPLICIT, index, create_brand_pattern(normalized)))

        if not name_variations:
            continue

        derived: set[str] = set()
        for name in brand.all_names():
            if loses_name_symbols(name):
                continue
            for variation in brand_variations(name):
                if variation in explicit or variation in derived:
                    continue
                derived.add(variation)
                table.append((variation, _VARIATION, index, create_brand_pattern(variation)))

    table.sort(key=lambda entry: (-len(entry[0]), entry[1], entry[2]))
    return table


def _fuzzy_best_window(
    words: list[re.Match],
    alias: str,
    threshold: float,
    claimed: list[tuple[int, int]],
) -> tuple[int, int, str, float] | None:
    """
    Find the best-scoring word window whose similarity to alias meets threshold.

    Windows have the alias' word count and must not overlap claimed spans.
    Equal scores keep the earliest window.

    Returns:
        (start, end, window_text, score) or None
    """
    size = len(alias.split())
    best: tuple[int, int, str, float] | None = None
    for i in range(len(words) - size + 1):
        start = words[i].start()
        end = words[i + size - 1].end()
        if _overlaps(start, end, claimed):
            continue
        window = " ".join(w.group(0) for w in words[i : i + size]).lower()
        score = fuzz.ratio(window, alias)
        if score >= threshold and (best is None or score > best[3]):
            best = (start, end, window, score)
    return best


def find_mentions(
    normalized_text: str,
    brands: list[Brand] | Any,
    fuzzy_threshold: float = 0.0,
    name_variations: bool = True,
) -> list[Mention]:
    """
    Find brand mentions in normalized answer text.

    Process:
    1. Normalize every brand name and alias, derive name variations, build
       word-boundary patterns
    2. Match aliases longest first; each match claims its span and shorter
       matches overlapping a claimed span are discarded
    3. Count surviving occurrences per brand and keep the first (lowest
       offset) one
    4. If fuzzy_threshold > 0, fuzzy match brands still missing against
       unclaimed word windows, keeping the best-scoring window
    5. Sort by offset (ties by brand-list order) and assign 1-based positions

    Args:
        normalized_text: Output of normalize() for one LLM response
        brands: Tracked brands in priority order (Brand, dict or str items)
        fuzzy_threshold: Minimum rapidfuzz ratio (0-100); 0 disables fuzzy
        name_variations: Also match suffix-stripped name variations

    Returns:
        Mentions sorted by position, one per brand. Brands that do not appear
        are omitted. Empty list for non-string text or an empty/invalid brand
        list.

    Example:
        >>> mentions = find_mentions(
        ...     "jpmorgan chase leads and chase sapphire follows",
        ...     [Brand(name="Chase Sapphire"), Brand(name="JPMorgan Chase")],
        ... )
        >>> [(m.brand_name, m.position) for m in mentions]
        [('JPMorgan Chase', 1), ('Chase Sapphire', 2)]
    """
    if not isinstance(normalized_text, str) or not normalized_text.strip():
        return []

    brand_list = coerce_brands(brands)
    if not brand_list:
        logger.debug("No valid brands supplied, skipping mention matching")
        return []

    claimed: list[tuple[int, int]] = []
    # brand_index -> (offset, matched_text, match_type, score)
    first_seen: dict[int, tuple[int, str, str, float | None]] = {}
    counts: dict[int, int] = {}

    for _alias, _priority, brand_index, pattern in _build_alias_table(brand_list, name_variations):
        for match in pattern.finditer(normalized_text):
            start, end = match.span()
            if _overlaps(start, end, claimed):
                continue
            claimed.append((start, end))
            counts[brand_index] = counts.get(brand_index, 0) + 1

            existing = first_seen.get(brand_index)
            if existing is None or start < existing[0]:
                first_seen[brand_index] = (start, match.group(0), "exact", None)

    if fuzzy_threshold > 0:
        words = list(_WORD_PATTERN.finditer(normalized_text))
        for brand_index, brand in enumerate(brand_list):
            if brand_index in first_seen:
                continue

            best: tuple[int, int, str, float] | None = None
            for name in brand.all_names():
                alias = normalize(name).lower()
                if len(alias) < MIN_FUZZY_ALIAS_LENGTH or loses_name_symbols(name):
                    continue
                found = _fuzzy_best_window(words, alias, fuzzy_threshold, claimed)
                if found is None:
                    continue
                # Best score across aliases, earliest window on ties
                if best is None or (-found[3], found[0]) < (-best[3], best[0]):
                    best = found

            if best is not None:
                start, end, window, score = best
                claimed.append((start, end))
                counts[brand_index] = 1
                first_seen[brand_index] = (start, window, "fuzzy", score)

    ordered = sorted(first_seen.items(), key=lambda item: (item[1][0], item[0]))

    mentions = []
    for position, (brand_index, (offset, matched_text, match_type, score)) in enumerate(
        ordered, start=1
    ):
        brand = brand_list[brand_index]
        mentions.append(
            Mention(
                brand_name=brand.name,
                position=position,
                char_offset=offset,
                is_owner=brand.is_owner,
                matched_text=matched_text,
                match_type=match_type,
                fuzzy_score=score,
                mention_count=counts.get(brand_index, 1),
            )
        )

    return mentions
