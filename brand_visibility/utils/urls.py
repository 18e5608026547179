"""
URL host helpers shared by the data model and citation handling.

Only the host part of a URL is ever inspected here. Paths and query strings
are ignored on purpose by every function in this module, which is what keeps
citation classification path-independent.
"""

import re
from urllib.parse import urlsplit

_IPV4_PATTERN = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")
_TLD_PATTERN = re.compile(r"^(?:[a-z]{2,}|xn--[a-z0-9-]+)$")

# Second-level labels that form two-part public suffixes (example.co.uk)
_TWO_PART_SUFFIX_LABELS = frozenset({"co", "com", "org", "net", "ac", "gov", "edu"})


def normalize_host(value: str | None) -> str | None:
    """
    Extract a normalized host from a URL or bare domain.

    Lowercases, drops scheme, port, path, query, a trailing dot and a leading
    "www." label.

    Args:
        value: URL ("https://www.Example.com/a?b"), bare domain
            ("example.com/path") or None

    Returns:
        Host such as "example.com", or None if no host can be resolved

    Example:
        >>> normalize_host("https://www.ycombinator.com/companies")
        'ycombinator.com'
        >>> normalize_host("Blog.Chase.com:443")
        'blog.chase.com'
        >>> normalize_host("not a url") is None
        True
    """
    if not isinstance(value, str):
        return None

    candidate = value.strip().lower()
    if not candidate:
        return None

    if "://" not in candidate:
        candidate = "//" + candidate

    try:
        host = urlsplit(candidate).hostname
    except ValueError:
        return None

    if not host:
        return None

    host = host.rstrip(".")
    if host.startswith("www."):
        host = host[4:]

    if not host or any(ch.isspace() for ch in host):
        return None

    return host


def is_valid_host(host: str | None) -> bool:
    """
    Check that a host looks like a public domain or routable IPv4 address.

    Rejects localhost, empty labels, hosts without a TLD and non-routable
    IPv4 ranges (0/8, 127/8, 169.254/16, multicast, reserved, broadcast).

    Example:
        >>> is_valid_host("ycombinator.com")
        True
        >>> is_valid_host("localhost")
        False
        >>> is_valid_host("127.0.0.1")
        False
    """
    if not host:
        return False

    if host == "localhost" or ".." in host or host.startswith(".") or host.endswith("."):
        return False

    ip_match = _IPV4_PATTERN.match(host)
    if ip_match:
        octets = [int(part) for part in ip_match.groups()]
        if any(octet > 255 for octet in octets):
            return False
        first, second = octets[0], octets[1]
        if first in (0, 127) or first >= 224:
            return False
        if first == 169 and second == 254:
            return False
        return True

    labels = host.split(".")
    if len(labels) < 2 or not all(labels):
        return False

    return bool(_TLD_PATTERN.match(labels[-1]))


def host_matches_domain(host: str | None, domain: str | None) -> bool:
    """
    Return True if host equals domain or is a subdomain of it.

    Example:
        >>> host_matches_domain("blog.chase.com", "chase.com")
        True
        >>> host_matches_domain("notchase.com", "chase.com")
        False
    """
    if not host or not domain:
        return False
    return host == domain or host.endswith("." + domain)


def registrable_label(host: str | None) -> str | None:
    """
    Return the registrable (second-level) label of a host.

    Handles two-part public suffixes such as "co.uk".

    Example:
        >>> registrable_label("www.blog.chase.com")
        'chase'
        >>> registrable_label("hdfcbank.co.in")
        'hdfcbank'
    """
    if not host:
        return None

    labels = host.split(".")
    if len(labels) == 1:
        return labels[0]

    if (
        len(labels) >= 3
        and len(labels[-1]) == 2
        and labels[-2] in _TWO_PART_SUFFIX_LABELS
    ):
        return labels[-3]

    return labels[-2]
