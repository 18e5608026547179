"""
Prompt deduplication for generated visibility prompts.

Public API:
    - dedupe: Return the surviving prompt strings
    - dedupe_with_report: Return accepted candidates plus rejection reasons
    - duplicate_stats: Count exact duplicates in a prompt list
    - normalize_prompt_text / prompt_hash: Canonical form and its sha256
    - similarity: Token Jaccard / edit-ratio similarity of two prompts
"""

from .deduplicator import (
    DedupReport,
    RejectedPrompt,
    dedupe,
    dedupe_with_report,
    duplicate_stats,
    normalize_prompt_text,
    prompt_hash,
    similarity,
)

__all__ = [
    "DedupReport",
    "RejectedPrompt",
    "dedupe",
    "dedupe_with_report",
    "duplicate_stats",
    "normalize_prompt_text",
    "prompt_hash",
    "similarity",
]
