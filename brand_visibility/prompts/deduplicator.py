"""
Prompt deduplication for Brand Visibility.

Generated prompt sets tend to repeat themselves: the same question with
different punctuation, near-paraphrases, and long runs of prompts opening
with the same words ("What are the best ..."). This module filters a
candidate list down to a diverse set.

Each candidate, in input order, is rejected when:
- it is empty after normalization ("empty")
- its normalized sha256 hash equals an accepted or existing prompt's
  ("exact_duplicate")
- its similarity to an accepted or existing prompt exceeds
  DedupSettings.similarity_threshold ("near_duplicate")
- its opening lead_ngram_size words already open max_lead_phrase_reuse
  accepted prompts ("lead_phrase_overused")

Decisions only ever look at prompts accepted earlier, so earlier candidates
always win and deduplicating an already deduplicated list changes nothing.
"""

import hashlib
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from rapidfuzz import fuzz

from brand_visibility.config.schema import DedupSettings
from brand_visibility.models import PromptCandidate

logger = logging.getLogger(__name__)

_NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9]+")

REJECT_EMPTY = "empty"
REJECT_EXACT = "exact_duplicate"
REJECT_NEAR = "near_duplicate"
REJECT_LEAD_PHRASE = "lead_phrase_overused"


@dataclass
class RejectedPrompt:
    """
    A candidate prompt that did not survive deduplication.

    Attributes:
        text: Candidate as given (repr for non-strings)
        reason: One of "empty", "exact_duplicate", "near_duplicate",
            "lead_phrase_overused"
        matched: Accepted/existing prompt it collided with, or the overused
            lead phrase. None for empty candidates.
    """

    text: str
    reason: str
    matched: str | None = None


@dataclass
class DedupReport:
    """Accepted candidates in input order plus every rejection with its reason."""

    accepted: list[PromptCandidate] = field(default_factory=list)
    rejected: list[RejectedPrompt] = field(default_factory=list)

    @property
    def texts(self) -> list[str]:
        """Accepted prompt texts."""
        return [candidate.text for candidate in self.accepted]

    def reason_counts(self) -> dict[str, int]:
        """Number of rejections per reason."""
        return dict(Counter(r.reason for r in self.rejected))


def normalize_prompt_text(text: str) -> str:
    """
    Canonical form used for hashing and similarity.

    Lowercases, turns every run of non-alphanumeric characters into a single
    space, and trims.

    Example:
        >>> normalize_prompt_text("  What's the BEST accelerator?? ")
        'what s the best accelerator'
    """
    if not isinstance(text, str):
        return ""
    return _NON_ALNUM_PATTERN.sub(" ", text.lower()).strip()


def prompt_hash(text: str) -> str:
    """Return the sha256 hex digest of the normalized prompt."""
    return hashlib.sha256(normalize_prompt_text(text).encode("utf-8")).hexdigest()


def similarity(a: str, b: str) -> float:
    """
    Similarity of two normalized prompts in [0, 1].

    The larger of token-set Jaccard overlap (catches reordering) and
    rapidfuzz edit ratio (catches small spelling changes).

    Example:
        >>> similarity("best banks for students", "for students best banks")
        1.0
        >>> similarity("best accelerators", "best accelerators")
        1.0
    """
    tokens_a = set(a.split())
    tokens_b = set(b.split())
    union = tokens_a | tokens_b
    jaccard = len(tokens_a & tokens_b) / len(union) if union else 0.0
    return max(jaccard, fuzz.ratio(a, b) / 100.0)


def _lead_phrase(normalized: str, size: int) -> str:
    """First size words of a normalized prompt."""
    return " ".join(normalized.split()[:size])


def dedupe_with_report(
    candidates: list[str] | Any,
    settings: DedupSettings | None = None,
    existing: list[str] | None = None,
) -> DedupReport:
    """
    Deduplicate candidate prompts, keeping the reason for every rejection.

    Args:
        candidates: Prompt strings in priority order. Non-strings are
            rejected as empty.
        settings: Thresholds (defaults to DedupSettings())
        existing: Prompts already in use (e.g. saved earlier). They block
            duplicates but are never returned and do not count toward lead
            phrase reuse.

    Returns:
        DedupReport with accepted PromptCandidates in input order

    Example:
        >>> report = dedupe_with_report(
        ...     ["Best accelerators?", "best accelerators", "Top accelerators for AI startups"]
        ... )
        >>> report.texts
        ['Best accelerators?', 'Top accelerators for AI startups']
        >>> report.rejected[0].reason
        'exact_duplicate'
    """
    settings = settings or DedupSettings()
    report = DedupReport()

    if not isinstance(candidates, (list, tuple)):
        logger.debug("Candidates is not a list, nothing to deduplicate")
        return report

    # (normalized, original text) for every prompt that blocks later ones
    blocking: list[tuple[str, str]] = []
    hashes: dict[str, str] = {}

    for prompt in existing if isinstance(existing, (list, tuple)) else []:
        normalized = normalize_prompt_text(prompt)
        if not normalized:
            continue
        blocking.append((normalized, prompt))
        hashes.setdefault(prompt_hash(prompt), prompt)

    lead_counts: Counter[str] = Counter()

    for candidate in candidates:
        normalized = normalize_prompt_text(candidate)
        if not normalized:
            report.rejected.append(
                RejectedPrompt(
                    text=candidate if isinstance(candidate, str) else repr(candidate),
                    reason=REJECT_EMPTY,
                )
            )
            logger.debug("Rejected empty prompt", extra={"context": {"prompt": repr(candidate)}})
            continue

        digest = prompt_hash(candidate)
        rejection = None

        if digest in hashes:
            rejection = RejectedPrompt(candidate, REJECT_EXACT, hashes[digest])
        else:
            for other_normalized, other_text in blocking:
                score = similarity(normalized, other_normalized)
                if score > settings.similarity_threshold:
                    rejection = RejectedPrompt(candidate, REJECT_NEAR, other_text)
                    break

        lead = _lead_phrase(normalized, settings.lead_ngram_size)
        if rejection is None and lead_counts[lead] >= settings.max_lead_phrase_reuse:
            rejection = RejectedPrompt(candidate, REJECT_LEAD_PHRASE, lead)

        if rejection is not None:
            report.rejected.append(rejection)
            logger.debug(
                "Rejected prompt",
                extra={
                    "context": {
                        "prompt": candidate,
                        "reason": rejection.reason,
                        "matched": rejection.matched,
                    }
                },
            )
            continue

        report.accepted.append(PromptCandidate(text=candidate, normalized_hash=digest))
        blocking.append((normalized, candidate))
        hashes[digest] = candidate
        lead_counts[lead] += 1

    logger.debug(
        "Deduplicated prompts",
        extra={
            "context": {
                "candidates": len(candidates),
                "accepted": len(report.accepted),
                "rejected": report.reason_counts(),
            }
        },
    )

    return report


def dedupe(
    candidates: list[str] | Any,
    settings: DedupSettings | None = None,
    existing: list[str] | None = None,
) -> list[str]:
    """
    Deduplicate candidate prompts.

    See dedupe_with_report() for the rules. Returns the surviving prompts in
    input order; dedupe(dedupe(x)) == dedupe(x).
    """
    return dedupe_with_report(candidates, settings, existing).texts


def duplicate_stats(prompts: list[str] | Any) -> dict[str, Any]:
    """
    Count exact (normalized hash) duplicates in a prompt list.

    Example:
        >>> duplicate_stats(["Best banks?", "best banks", "Top banks"])
        {'total': 3, 'unique': 2, 'duplicates': 1, 'duplicate_rate': 33.33}
    """
    if not isinstance(prompts, (list, tuple)):
        prompts = []

    seen: set[str] = set()
    duplicates = 0
    for prompt in prompts:
        digest = prompt_hash(prompt)
        if digest in seen:
            duplicates += 1
        else:
            seen.add(digest)

    total = len(prompts)
    return {
        "total": total,
        "unique": total - duplicates,
        "duplicates": duplicates,
        "duplicate_rate": round(100 * duplicates / total, 2) if total else 0.0,
    }
