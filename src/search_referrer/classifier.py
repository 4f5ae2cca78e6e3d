"""
Search engine and keyword detection from referrer URLs.

Given the raw Referer of a visit, finds out whether a known search engine
sent the visitor and which keyword they searched for. Keywords are:

- decoded to text, converted from the engine's charset when it declares one
- lowercased: "QUErY test!" becomes "query test!"
- trimmed

Some engines are known to hide the keyword (Google over HTTPS, Google
Images, DuckDuckGo). Those still count as a search engine match, with an
empty keyword. A referrer that is not a search engine, or a search engine
URL with no keyword where one is expected, gives None.
"""

import logging
from dataclasses import dataclass
from urllib.parse import unquote_plus, unquote_to_bytes

from .query import get_parameter
from .registry import SearchEngineRegistry, SearchEngineRule, get_search_engine_registry
from .url import parse_url

logger = logging.getLogger(__name__)

# Engines with special handling
GOOGLE = "Google"
GOOGLE_IMAGES = "Google Images"
DUCKDUCKGO = "DuckDuckGo"

# Google top bar menu (tbm parameter) -> vertical search name
GOOGLE_TBM_ENGINES = {
    "isch": "Google Images",
    "vid": "Google Video",
    "shop": "Google Shopping",
}

# Joins the terms of the "any of these words" advanced search field
GOOGLE_OR_OPERATOR = " OR "

# Engines that may send an empty or missing "q" on purpose
NO_KEYWORD_ENGINES = (GOOGLE_IMAGES, DUCKDUCKGO)


class _NoKeyword:
    """Marker: search engine matched but it did not send the keyword."""

    def __repr__(self) -> str:
        return "NO_KEYWORD"


NO_KEYWORD = _NoKeyword()


@dataclass(frozen=True)
class SearchEngineMatch:
    """
    A referrer identified as a search engine.

    Attributes:
        name: Search engine name (e.g., "Google", "Google Images")
        keyword: Searched keyword, "" when the engine did not send it
    """
    name: str
    keyword: str = ""

    @property
    def has_keyword(self) -> bool:
        return bool(self.keyword)


def _url_decode(value, strip: bool = True) -> bytes:
    """Decode a query value ("+" is a space) to raw bytes."""
    if not isinstance(value, str):
        return b""
    decoded = unquote_to_bytes(value.replace("+", " "))
    return decoded.strip() if strip else decoded


def _resolve_rule(
    registry: SearchEngineRegistry,
    host: str,
    path: str,
    query: str,
) -> tuple[str, SearchEngineRule] | None:
    """Find the rule for a referrer, falling back to known URL shapes."""
    found = registry.lookup(host + path, host)
    if found is not None:
        return found

    if query.startswith("cx=partner-pub-"):
        # Google custom search engine
        key = "google.com/cse"
    elif path.startswith("/pemonitorhosted/ws/results/"):
        # Private-label search powered by InfoSpace Metasearch
        key = "wsdsold.infospace.com"
    elif ".images.search.yahoo.com" in host:
        key = "images.search.yahoo.com"
    elif ".search.yahoo.com" in host:
        key = "search.yahoo.com"
    else:
        return None

    rule = registry.get(key)
    if rule is None:
        return None
    return key, rule


def _google_images_query(query: str) -> str:
    """
    Get the query of the original image search from a Google Images
    result URL, which carries it in its "prev" parameter.
    """
    if "&prev" not in query:
        return query

    prev = get_parameter(query, "prev")
    prev = unquote_plus(prev.strip()) if isinstance(prev, str) else ""
    _, sep, prev_query = prev.partition("?")
    return ("?" + prev_query).replace("&", "&amp;") if sep else ""


def _google_advanced_search_keyword(query: str, charsets: tuple[str, ...]) -> str:
    """
    Rebuild the keyword of a Google advanced search from its as_* fields:
    all these words, any of these words (OR), exact phrase, none of these.

    Search terms are lowercased, the OR operator is kept as Google expects it.
    """
    def text(value: str) -> str:
        return _decode_keyword(_url_decode(value, strip=False), charsets).lower()

    keys = []
    all_words = get_parameter(query, "as_q")
    if all_words and isinstance(all_words, str):
        keys.append(text(all_words))
    any_words = get_parameter(query, "as_oq")
    if any_words and isinstance(any_words, str):
        keys.append(GOOGLE_OR_OPERATOR.join(text(term) for term in any_words.split("+")))
    phrase = get_parameter(query, "as_epq")
    if phrase and isinstance(phrase, str):
        keys.append(f'"{text(phrase)}"')
    excluded = get_parameter(query, "as_eq")
    if excluded and isinstance(excluded, str):
        keys.append(f"-{text(excluded)}")
    return " ".join(keys).strip()


def _is_keyword_hidden(name: str, query: str, path: str, fragment: str | None) -> bool:
    """Whether an empty "q" means the engine hid the keyword."""
    if name == GOOGLE:
        return (
            # Empty q= parameter
            "&q=" in query
            or "?q=" in query
            or query.startswith("q=")
            # Host only, no path or query string
            or (not query and path in ("", "/") and not fragment)
        )
    return name in NO_KEYWORD_ENGINES


def _decode_keyword(keyword: bytes, charsets: tuple[str, ...]) -> str:
    """
    Convert keyword bytes to text.

    With several candidate charsets, the first one the bytes are valid in
    is used. Bytes invalid in the chosen charset are dropped. Without
    charsets, or if conversion fails, the keyword is read as UTF-8.
    """
    if charsets:
        charset = charsets[0]
        if len(charsets) > 1:
            for candidate in charsets:
                try:
                    keyword.decode(candidate)
                except (UnicodeDecodeError, LookupError):
                    continue
                charset = candidate
                break
            else:
                logger.debug(f"No charset of {charsets} matches keyword, using {charset}")

        try:
            converted = keyword.decode(charset, errors="ignore")
        except LookupError:
            logger.debug(f"Unknown keyword charset {charset!r}")
            converted = ""
        if converted:
            return converted

    return keyword.decode("utf-8", errors="replace")


def detect_search_engine(
    referrer_url: str,
    registry: SearchEngineRegistry | None = None,
) -> SearchEngineMatch | None:
    """
    Detect the search engine and keyword of a referrer URL.

    Args:
        referrer_url: Raw Referer header value
        registry: Search engine registry (defaults to the built-in one)

    Returns:
        SearchEngineMatch, or None if the referrer is not a search engine
        or the keyword could not be found

    Examples:
        >>> detect_search_engine("http://www.google.com/search?q=piwik+analytics")
        SearchEngineMatch(name='Google', keyword='piwik analytics')

        >>> detect_search_engine("https://duckduckgo.com/?q=")
        SearchEngineMatch(name='DuckDuckGo', keyword='')

        >>> detect_search_engine("http://www.google.com/partners.html") is None
        True
    """
    if not referrer_url or not isinstance(referrer_url, str):
        return None

    parsed = parse_url(referrer_url)
    if parsed is None or not parsed.host:
        return None

    host = parsed.host
    # Some engines (e.g. Bing Images) share a host with another engine
    path = parsed.path or ""
    query = parsed.query or ""

    # Google sometimes puts the keyword in the fragment
    if parsed.fragment:
        query += "&" + parsed.fragment

    if registry is None:
        registry = get_search_engine_registry()

    found = _resolve_rule(registry, host, path, query)
    if found is None:
        return None
    _, rule = found

    name = rule.name
    keyword_specs = registry.get_keyword_specs(rule)

    advanced_keyword = ""
    if name == GOOGLE_IMAGES or (name == GOOGLE and "/imgres" in referrer_url):
        query = _google_images_query(query)
        name = GOOGLE_IMAGES
    elif name == GOOGLE and ("&as_" in query or query.startswith("as_")):
        advanced_keyword = _google_advanced_search_keyword(query, rule.charsets)

    if name == GOOGLE:
        tbm = get_parameter(query, "tbm")
        if isinstance(tbm, str):
            name = GOOGLE_TBM_ENGINES.get(tbm, name)

    if advanced_keyword:
        return SearchEngineMatch(name=name, keyword=advanced_keyword)

    keyword: bytes | _NoKeyword | None = None
    for spec in keyword_specs:
        if spec.is_pattern:
            if spec.pattern.groups < 1:
                continue
            match = spec.pattern.search(referrer_url)
            if match:
                keyword = _url_decode(match.group(1))
                break
        else:
            keyword = _url_decode(get_parameter(query, spec.parameter))
            if not keyword and spec.parameter == "q" and _is_keyword_hidden(
                name, query, path, parsed.fragment
            ):
                keyword = NO_KEYWORD
            if keyword:
                break

    if keyword is NO_KEYWORD:
        return SearchEngineMatch(name=name, keyword="")
    if not keyword:
        return None

    text = _decode_keyword(keyword, rule.charsets)
    return SearchEngineMatch(name=name, keyword=text.lower())
