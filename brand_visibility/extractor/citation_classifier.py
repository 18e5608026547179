"""
Citation classification for Brand Visibility.

Labels each citation "brand" (the URL's host is owned by a tracked brand) or
"earned" (third-party host).

CRITICAL: Only the host is compared, never the path or query. A directory
page such as https://crunchbase.com/lists/accelerators/y-combinator names a
brand in its path but is a third-party source, so it is "earned".

Ownership rules, in order:
1. Host equals or is a subdomain of a brand's explicit domain (the most
   specific matching domain wins)
2. Optionally, for brands without an explicit domain: the host's registrable
   label equals the brand name or an alias compacted to [a-z0-9]
   ("chase.com" -> "Chase", "ycombinator.com" -> "Y Combinator")

Anything unresolvable (no host, invalid host) is "earned": calling a third
party brand-owned is the worse error.
"""

import dataclasses
import re
from typing import Any

from brand_visibility.extractor.citation_extractor import clean_url
from brand_visibility.models import Brand, Citation, CitationType, coerce_brands
from brand_visibility.utils.urls import (
    host_matches_domain,
    is_valid_host,
    normalize_host,
    registrable_label,
)

# Community and social platforms (shared media). Not brand lists: used only to
# flag social citations, never to change a citation's type.
SOCIAL_HOSTS = frozenset(
    {
        "facebook.com",
        "fb.com",
        "twitter.com",
        "x.com",
        "t.co",
        "instagram.com",
        "linkedin.com",
        "youtube.com",
        "youtu.be",
        "tiktok.com",
        "snapchat.com",
        "pinterest.com",
        "reddit.com",
        "quora.com",
        "medium.com",
        "substack.com",
        "tumblr.com",
        "threads.net",
        "mastodon.social",
        "discord.com",
        "discord.gg",
        "telegram.org",
        "t.me",
        "whatsapp.com",
        "twitch.tv",
        "vimeo.com",
        "news.ycombinator.com",
        "stackoverflow.com",
        "github.com",
    }
)

_NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9]")


def _compact(name: str) -> str:
    """Lowercase and drop everything except [a-z0-9] ("Y Combinator" -> "ycombinator")."""
    return _NON_ALNUM_PATTERN.sub("", name.lower())


def is_social_host(host: str | None) -> bool:
    """
    Return True if host belongs to a well-known social/community platform.

    Example:
        >>> is_social_host("old.reddit.com")
        True
        >>> is_social_host("ycombinator.com")
        False
    """
    if not host:
        return False
    return any(host_matches_domain(host, social) for social in SOCIAL_HOSTS)


def citation_host(citation: Citation | dict | str | Any) -> str | None:
    """
    Resolve the normalized host of a citation-like value.

    Accepts a Citation, a dict with "cleaned_url" or "url", or a URL string.
    Only the host is returned; the path is discarded here.

    Returns:
        Host such as "crunchbase.com", or None if unresolvable/invalid
    """
    if isinstance(citation, Citation):
        url = citation.cleaned_url or citation.url
    elif isinstance(citation, dict):
        url = citation.get("cleaned_url") or citation.get("url")
    else:
        url = citation

    host = normalize_host(clean_url(url)) if isinstance(url, str) else None
    return host if is_valid_host(host) else None


def find_owner(
    host: str | None,
    brands: list[Brand] | Any,
    infer_domains_from_names: bool = True,
) -> Brand | None:
    """
    Find the brand owning a host.

    Args:
        host: Normalized host (see citation_host)
        brands: Tracked brands
        infer_domains_from_names: Allow name-based ownership for brands
            without an explicit domain

    Returns:
        Owning Brand, or None for third-party hosts

    Example:
        >>> find_owner("www.ycombinator.com", [Brand(name="Y Combinator", domain="ycombinator.com")]).name
        'Y Combinator'
        >>> find_owner("crunchbase.com", [Brand(name="Y Combinator", domain="ycombinator.com")]) is None
        True
    """
    if not host:
        return None

    host = normalize_host(host)
    brand_list = coerce_brands(brands)

    explicit = [
        brand
        for brand in brand_list
        if brand.domain and host_matches_domain(host, brand.domain)
    ]
    if explicit:
        return max(explicit, key=lambda brand: len(brand.domain))

    if not infer_domains_from_names:
        return None

    label = registrable_label(host)
    if not label:
        return None

    for brand in brand_list:
        if brand.domain:
            continue
        compacted = {_compact(name) for name in brand.all_names()}
        if label in compacted:
            return brand

    return None


def classify(
    citation: Citation | dict | str | Any,
    brands: list[Brand] | Any,
    infer_domains_from_names: bool = True,
) -> CitationType:
    """
    Classify a citation as "brand" or "earned" by host ownership.

    Args:
        citation: Citation, dict with "url"/"cleaned_url", or URL string
        brands: Tracked brands (owner and competitors)
        infer_domains_from_names: See find_owner

    Returns:
        "brand" if the host is owned by a tracked brand, else "earned"

    Example:
        >>> yc = [Brand(name="Y Combinator", domain="ycombinator.com")]
        >>> classify({"url": "https://crunchbase.com/lists/accelerators/y-combinator"}, yc)
        'earned'
        >>> classify({"url": "https://www.ycombinator.com/companies"}, yc)
        'brand'
    """
    owner = find_owner(citation_host(citation), brands, infer_domains_from_names)
    return "brand" if owner is not None else "earned"


def classify_citation(
    citation: Citation,
    brands: list[Brand] | Any,
    infer_domains_from_names: bool = True,
) -> Citation | None:
    """
    Return a copy of citation with type, owner_brand and host filled in.

    Returns:
        Classified Citation, or None if citation is not a Citation
    """
    if not isinstance(citation, Citation):
        return None

    host = citation_host(citation)
    owner = find_owner(host, brands, infer_domains_from_names)

    return dataclasses.replace(
        citation,
        type="brand" if owner is not None else "earned",
        owner_brand=owner.name if owner is not None else None,
        host=host,
    )


def classify_citations(
    citations: list[Citation] | Any,
    brands: list[Brand] | Any,
    infer_domains_from_names: bool = True,
) -> list[Citation]:
    """
    Classify a list of citations, skipping entries that are not Citations.

    Returns:
        Classified copies in input order; empty list for non-list input
    """
    if not isinstance(citations, (list, tuple)):
        return []

    brand_list = coerce_brands(brands)
    classified = []
    for citation in citations:
        result = classify_citation(citation, brand_list, infer_domains_from_names)
        if result is not None:
            classified.append(result)
    return classified
