"""
Configuration for search referrer analysis.
"""
import logging
import re
from dataclasses import dataclass

from .registry import (
    SearchEngineRegistry,
    get_search_engine_registry,
)
from .search_engines import SEARCH_ENGINES

logger = logging.getLogger(__name__)

# Referrers longer than this are rejected by the HTTP routes
DEFAULT_MAX_REFERRER_LENGTH = 2048

_COUNTRY_CODE = re.compile(r"^[a-z]{2}$")


@dataclass
class ReferrerConfig:
    """Configuration for a search referrer instance."""

    # Site domain, referrers from it are internal traffic
    site_domain: str | None = None

    # Search engine definitions added to (or overriding) the built-in table
    extra_search_engines: dict[str, tuple] | None = None

    # Two-letter codes collapsed by the lossy host (defaults to all ccTLDs)
    country_codes: frozenset[str] | None = None

    # HTTP routes input limit
    max_referrer_length: int = DEFAULT_MAX_REFERRER_LENGTH

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_country_codes()
        if self.max_referrer_length <= 0:
            raise ValueError(
                f"max_referrer_length must be positive, got {self.max_referrer_length}"
            )
        self._registry: SearchEngineRegistry | None = None
        if self.has_custom_registry:
            # Definitions are validated eagerly
            self._registry = self._build_custom_registry()

    def _validate_country_codes(self) -> None:
        """Lowercase country codes and drop the ones that are not two letters."""
        if self.country_codes is None:
            return

        normalized = {code.strip().lower() for code in self.country_codes}
        invalid = sorted(code for code in normalized if not _COUNTRY_CODE.match(code))
        if invalid:
            logger.warning(f"Ignoring invalid country codes: {', '.join(invalid)}")
        valid = frozenset(normalized) - frozenset(invalid)

        if not valid:
            logger.warning("No valid country codes configured, using the default list")
            self.country_codes = None
        else:
            self.country_codes = valid

    @property
    def has_custom_registry(self) -> bool:
        """Check if the search engine table or country list is overridden."""
        return bool(self.extra_search_engines) or self.country_codes is not None

    def _build_custom_registry(self) -> SearchEngineRegistry:
        definitions = {**SEARCH_ENGINES, **(self.extra_search_engines or {})}
        registry = SearchEngineRegistry.from_definitions(
            definitions, country_codes=self.country_codes
        )
        logger.debug(
            f"Built search engine registry with {len(registry)} definitions "
            f"({len(self.extra_search_engines or {})} custom)"
        )
        return registry

    def build_registry(self) -> SearchEngineRegistry:
        """Get the registry for this configuration.

        Returns the shared default registry unless definitions or country
        codes are overridden.
        """
        if self._registry is not None:
            return self._registry
        return get_search_engine_registry()
