"""
Search engine registry.

Turns the static SEARCH_ENGINES table into immutable rules and resolves a
referrer host (and path) to the rule of the engine that served it.

The default registry is built once per process, on first use, and is
read-only afterwards: it can be shared between threads without locking.
"""

import logging
import re
from dataclasses import dataclass
from threading import Lock
from urllib.parse import quote_plus

from .countries import COUNTRY_CODES
from .search_engines import SEARCH_ENGINES
from .url import get_lossy_host

logger = logging.getLogger(__name__)

# Placeholder for the keyword in search URL templates
KEYWORD_PLACEHOLDER = "{k}"

# Lossy wildcard and what it stands for when building a URL
LOSSY_WILDCARD = "{}"
LOSSY_WILDCARD_DEFAULT = "com"


class InvalidSearchEngineDefinitionError(ValueError):
    """Raised when a search engine definition cannot be turned into a rule."""
    pass


@dataclass(frozen=True)
class KeywordSpec:
    """
    How to find the keyword in a referrer URL.

    Exactly one of the attributes is set.

    Attributes:
        parameter: Query parameter holding the keyword
        pattern: Regex applied to the full referrer URL, group 1 is the keyword
    """
    parameter: str | None = None
    pattern: re.Pattern | None = None

    @classmethod
    def from_definition(cls, definition: str) -> "KeywordSpec":
        """
        Build a spec from its definition text.

        "/regex/" (optionally "/regex/i") is a pattern, anything else
        a parameter name.
        """
        if not definition:
            raise InvalidSearchEngineDefinitionError("Empty keyword parameter")

        if definition[0] != "/":
            return cls(parameter=definition)

        end = definition.rfind("/")
        if end == 0:
            raise InvalidSearchEngineDefinitionError(
                f"Unterminated keyword pattern: {definition!r}"
            )

        flags = 0
        for modifier in definition[end + 1:]:
            if modifier == "i":
                flags |= re.IGNORECASE
            else:
                raise InvalidSearchEngineDefinitionError(
                    f"Unsupported pattern modifier {modifier!r} in {definition!r}"
                )

        try:
            pattern = re.compile(definition[1:end], flags)
        except re.error as e:
            raise InvalidSearchEngineDefinitionError(
                f"Invalid keyword pattern {definition!r}: {e}"
            ) from e

        return cls(pattern=pattern)

    @property
    def is_pattern(self) -> bool:
        return self.pattern is not None


@dataclass(frozen=True)
class SearchEngineRule:
    """
    Everything known about one search engine definition.

    Attributes:
        name: Display name (e.g., "Google")
        keyword_specs: Ordered keyword lookups, empty for alias entries
        search_url: Result page template ({k} is the keyword)
        charsets: Charsets keywords may be sent in, in order of preference
        alias: Key of the primary entry whose keyword specs this entry reuses
    """
    name: str
    keyword_specs: tuple[KeywordSpec, ...] = ()
    search_url: str | None = None
    charsets: tuple[str, ...] = ()
    alias: str | None = None


def _as_list(value) -> list[str]:
    """Accept a single string, a comma-separated string or a list."""
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def _parse_charsets(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(charset.strip() for charset in value if charset.strip())


class SearchEngineRegistry:
    """Lookup table from host patterns to search engine rules."""

    def __init__(
        self,
        rules: dict[str, SearchEngineRule],
        country_codes: frozenset[str] | None = None,
    ):
        self._rules = dict(rules)
        self.country_codes = frozenset(country_codes or COUNTRY_CODES)

        # First key declared for each name is the primary one
        self._primary_keys: dict[str, str] = {}
        for key, rule in self._rules.items():
            self._primary_keys.setdefault(rule.name, key)

    @classmethod
    def from_definitions(
        cls,
        definitions: dict[str, tuple],
        country_codes: frozenset[str] | None = None,
    ) -> "SearchEngineRegistry":
        """
        Build a registry from a definitions table (see search_engines.py).

        Raises:
            InvalidSearchEngineDefinitionError: If an entry has no name, an
                invalid pattern, or borrows specs from an engine that has none
        """
        rules: dict[str, SearchEngineRule] = {}
        primary_keys: dict[str, str] = {}

        for key, definition in definitions.items():
            if isinstance(definition, str):
                definition = (definition,)
            if not definition or not definition[0]:
                raise InvalidSearchEngineDefinitionError(
                    f"Search engine definition for {key!r} has no name"
                )

            name = definition[0]
            specs = tuple(
                KeywordSpec.from_definition(spec)
                for spec in _as_list(definition[1] if len(definition) > 1 else None)
            )
            search_url = definition[2] if len(definition) > 2 and definition[2] else None
            charsets = _parse_charsets(definition[3] if len(definition) > 3 else None)

            primary_keys.setdefault(name, key)
            alias = None
            if not specs:
                alias = primary_keys[name]
                if alias == key or not rules[alias].keyword_specs:
                    raise InvalidSearchEngineDefinitionError(
                        f"Search engine {name!r} ({key}) has no keyword parameters"
                    )

            rules[key] = SearchEngineRule(
                name=name,
                keyword_specs=specs,
                search_url=search_url,
                charsets=charsets,
                alias=alias,
            )

        return cls(rules, country_codes=country_codes)

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, key: str) -> bool:
        return key in self._rules

    def get(self, key: str) -> SearchEngineRule | None:
        """Get the rule stored under an exact key."""
        return self._rules.get(key)

    def items(self):
        return self._rules.items()

    def names(self) -> list[str]:
        """Search engine names, in declaration order."""
        return list(self._primary_keys)

    def get_primary_key(self, name: str) -> str | None:
        """Get the key of the first entry declared for a search engine name."""
        return self._primary_keys.get(name)

    def lossy_host(self, host: str) -> str:
        return get_lossy_host(host, self.country_codes)

    def lookup(self, host_and_path: str, host: str) -> tuple[str, SearchEngineRule] | None:
        """
        Find the rule for a referrer host.

        Tries, in order: exact host + path, lossy host + path, lossy host,
        exact host.

        Args:
            host_and_path: Referrer host immediately followed by its path
            host: Referrer host

        Returns:
            (matched key, rule), or None if no entry matches
        """
        path = host_and_path[len(host):] if host_and_path.startswith(host) else ""
        lossy = self.lossy_host(host)

        for key in (host_and_path, lossy + path, lossy, host):
            rule = self._rules.get(key)
            if rule is not None:
                return key, rule
        return None

    def get_keyword_specs(self, rule: SearchEngineRule) -> tuple[KeywordSpec, ...]:
        """Get a rule's keyword specs, following its alias if it has none."""
        if rule.keyword_specs or rule.alias is None:
            return rule.keyword_specs
        return self._rules[rule.alias].keyword_specs

    def get_search_url(self, name: str, keyword: str) -> str | None:
        """
        Build the result page URL of a search engine for a keyword.

        Returns None for unknown engines and engines without a template.

        Examples:
            >>> registry.get_search_url("Google", "piwik analytics")
            'http://google.com/search?q=piwik+analytics'
        """
        key = self.get_primary_key(name)
        if key is None:
            return None
        template = self._rules[key].search_url
        if not template:
            return None

        url = template.replace(KEYWORD_PLACEHOLDER, quote_plus(keyword))
        if not url.startswith(("http://", "https://")):
            host = key.split("/", 1)[0].replace(LOSSY_WILDCARD, LOSSY_WILDCARD_DEFAULT)
            url = f"http://{host}/{url}"
        return url


# Process-wide registry built from SEARCH_ENGINES
_default_registry: SearchEngineRegistry | None = None
_default_registry_lock = Lock()


def get_search_engine_registry() -> SearchEngineRegistry:
    """Get the default registry, building it on first use."""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                registry = SearchEngineRegistry.from_definitions(SEARCH_ENGINES)
                logger.info(f"Loaded {len(registry)} search engine definitions")
                _default_registry = registry
    return _default_registry
