"""
Search engine and keyword detection from referrer URLs.

Usage:
    from search_referrer import setup_search_referrer

    referrers = setup_search_referrer(site_domain="941return.com")

    # Per visit
    match = referrers.detect("https://www.google.com/search?q=piwik")
    # SearchEngineMatch(name='Google', keyword='piwik')

    # Include the HTTP routes
    app.include_router(referrers.router, prefix="/admin/referrers")
"""

from .classifier import SearchEngineMatch, detect_search_engine
from .config import DEFAULT_MAX_REFERRER_LENGTH, ReferrerConfig
from .query import build_query_string, get_parameter, parse_query_string
from .referrer import ReferrerInfo, ReferrerType, classify_referrer
from .registry import (
    InvalidSearchEngineDefinitionError,
    SearchEngineRegistry,
    get_search_engine_registry,
)
from .routes import create_referrer_router
from .url import (
    ParsedUrl,
    build_url,
    get_lossy_host,
    get_path_and_query,
    looks_like_url,
    parse_url,
)

__version__ = "0.1.0"
__all__ = [
    "setup_search_referrer", "SearchReferrer", "ReferrerConfig",
    "detect_search_engine", "SearchEngineMatch",
    "classify_referrer", "ReferrerInfo", "ReferrerType",
    "SearchEngineRegistry", "get_search_engine_registry", "InvalidSearchEngineDefinitionError",
    "parse_query_string", "build_query_string", "get_parameter",
    "create_referrer_router",
    "ParsedUrl", "parse_url", "build_url", "get_path_and_query", "get_lossy_host", "looks_like_url",
]


class SearchReferrer:
    """Main referrer analysis interface for a site."""

    def __init__(self, config: ReferrerConfig):
        self.config = config
        self.registry = config.build_registry()
        self.router = create_referrer_router(config)

    def detect(self, referrer_url: str) -> SearchEngineMatch | None:
        """Detect the search engine and keyword of a referrer URL."""
        return detect_search_engine(referrer_url, registry=self.registry)

    def classify(self, referrer: str | None) -> ReferrerInfo:
        """Classify a referrer into a traffic source for this site."""
        return classify_referrer(
            referrer,
            current_domain=self.config.site_domain,
            registry=self.registry,
        )

    def search_url(self, name: str, keyword: str) -> str | None:
        """Get the result page URL of a search engine for a keyword."""
        return self.registry.get_search_url(name, keyword)


def setup_search_referrer(
    site_domain: str | None = None,
    extra_search_engines: dict[str, tuple] | None = None,
    country_codes: frozenset[str] | None = None,
    max_referrer_length: int = DEFAULT_MAX_REFERRER_LENGTH,
) -> SearchReferrer:
    """
    Set up referrer analysis for a site.

    Args:
        site_domain: Site domain (e.g., "941return.com"), used to detect
                     internal navigation
        extra_search_engines: Search engine definitions added to the
                              built-in table, same format as SEARCH_ENGINES
        country_codes: Override of the two-letter codes used by lossy hosts
        max_referrer_length: Longest referrer accepted by the HTTP routes

    Returns:
        SearchReferrer instance with detect(), classify() and router

    Raises:
        InvalidSearchEngineDefinitionError: If extra_search_engines is invalid
    """
    config = ReferrerConfig(
        site_domain=site_domain,
        extra_search_engines=extra_search_engines,
        country_codes=country_codes,
        max_referrer_length=max_referrer_length,
    )
    return SearchReferrer(config)
