"""
Referrer classification for visit logs.

This module sorts the Referer header of each visit into:
- Direct: No referrer (typed URL, bookmarks, etc.)
- Search: A known search engine, with the keyword when it was sent
- Internal: Same-site navigation (filtered out of most reports)
- Website: Any other website linking to yours

Search engine detection itself lives in classifier.py.
"""

from collections import Counter
from dataclasses import dataclass
from enum import Enum

from .classifier import detect_search_engine
from .registry import SearchEngineRegistry
from .url import looks_like_url, parse_url


class ReferrerType(str, Enum):
    """Traffic source classification."""

    DIRECT = "direct"        # No referrer (bookmarks, typed URLs, dark social)
    SEARCH = "search"        # Search engine results
    INTERNAL = "internal"    # Same-site navigation
    WEBSITE = "website"      # Other websites


@dataclass(frozen=True)
class ReferrerInfo:
    """
    Classified referrer information.

    Attributes:
        type: The traffic source type
        domain: The referrer domain (normalized, without www)
        source_name: Search engine name (e.g., "Google")
        keyword: Searched keyword, "" if the engine did not send it
    """
    type: ReferrerType
    domain: str | None = None
    source_name: str | None = None
    keyword: str | None = None

    @property
    def is_search(self) -> bool:
        return self.type == ReferrerType.SEARCH


def _normalize_domain(domain: str) -> str:
    """Remove www. prefix and lowercase."""
    domain = domain.lower().strip()
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def _extract_domain(referrer: str) -> str | None:
    """
    Extract and normalize domain from referrer URL.

    Returns None if referrer is empty or unparseable.
    """
    if not looks_like_url(referrer):
        # Handle URLs without scheme
        referrer = "http://" + referrer

    parsed = parse_url(referrer)
    if parsed is None or not parsed.host:
        return None
    return _normalize_domain(parsed.host)


def classify_referrer(
    referrer: str | None,
    current_domain: str | None = None,
    registry: SearchEngineRegistry | None = None,
) -> ReferrerInfo:
    """
    Classify a referrer URL into a traffic source category.

    Args:
        referrer: The Referer header value (can be empty or None)
        current_domain: Optional current site domain to detect internal traffic
        registry: Search engine registry (defaults to the built-in one)

    Returns:
        ReferrerInfo with type, domain, source_name and keyword

    Examples:
        >>> classify_referrer("https://www.google.com/search?q=test")
        ReferrerInfo(type=<ReferrerType.SEARCH>, domain='google.com', source_name='Google', keyword='test')

        >>> classify_referrer("")
        ReferrerInfo(type=<ReferrerType.DIRECT>, domain=None, source_name=None, keyword=None)
    """
    # No referrer = direct traffic
    if not referrer or not referrer.strip():
        return ReferrerInfo(type=ReferrerType.DIRECT)

    referrer = referrer.strip()
    domain = _extract_domain(referrer)
    if not domain:
        return ReferrerInfo(type=ReferrerType.DIRECT)

    # Check for internal traffic (same domain)
    if current_domain:
        current_normalized = _normalize_domain(current_domain)
        if domain == current_normalized or domain.endswith("." + current_normalized):
            return ReferrerInfo(type=ReferrerType.INTERNAL, domain=domain)

    match = detect_search_engine(referrer, registry=registry)
    if match is not None:
        return ReferrerInfo(
            type=ReferrerType.SEARCH,
            domain=domain,
            source_name=match.name,
            keyword=match.keyword,
        )

    return ReferrerInfo(type=ReferrerType.WEBSITE, domain=domain)


def get_referrer_type_summary(referrer_infos: list[ReferrerInfo]) -> dict[str, int]:
    """
    Get traffic breakdown by source type.

    Args:
        referrer_infos: List of ReferrerInfo from classify_referrer()

    Returns:
        Dict mapping every source type to its count
    """
    counts = {referrer_type.value: 0 for referrer_type in ReferrerType}
    for info in referrer_infos:
        counts[info.type.value] += 1
    return counts


def get_top_keywords(
    referrer_infos: list[ReferrerInfo],
    limit: int = 10,
    include_hidden: bool = False,
) -> list[tuple[str, int]]:
    """
    Get the most searched keywords.

    Args:
        referrer_infos: List of ReferrerInfo from classify_referrer()
        limit: Maximum number of keywords to return
        include_hidden: Count searches without keyword under ""

    Returns:
        List of (keyword, count) tuples, sorted by count
    """
    counts: Counter[str] = Counter()

    for info in referrer_infos:
        if not info.is_search:
            continue
        if not info.keyword and not include_hidden:
            continue
        counts[info.keyword or ""] += 1

    return counts.most_common(limit)


def get_top_search_engines(
    referrer_infos: list[ReferrerInfo],
    limit: int = 10,
) -> list[tuple[str, int]]:
    """Get the search engines sending the most visits."""
    counts = Counter(info.source_name for info in referrer_infos if info.is_search)
    return counts.most_common(limit)
