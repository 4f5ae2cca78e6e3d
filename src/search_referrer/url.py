"""
URL parsing, rebuilding and lossy host normalization.

The lossy host is how search engines are matched across their many
country domains: google.de, google.co.uk and de.search.yahoo.com all
collapse onto a single wildcard form.

Examples:
    www.example.com    -> example.com
    search.example.com -> example.com
    m.example.com      -> example.com
    de.example.com     -> {}.example.com
    example.de         -> example.{}
    example.co.uk      -> example.{}
"""

import functools
import re
from dataclasses import dataclass
from urllib.parse import urlsplit

from .countries import COUNTRY_CODES


@dataclass(frozen=True)
class ParsedUrl:
    """
    A URL split into its components.

    Every component is None when absent from the source URL.
    """
    scheme: str | None = None
    user: str | None = None
    password: str | None = None
    host: str | None = None
    port: int | None = None
    path: str | None = None
    query: str | None = None
    fragment: str | None = None


# Second-level labels that commonly sit between a name and a ccTLD (co.uk)
LOSSY_SECOND_LEVEL = ("com", "org", "net", "co", "it", "edu")

_URL_LIKE = re.compile(r"^(ftp|news|http|https)?://(.*)\Z")


def parse_url(url: str) -> ParsedUrl | None:
    """
    Split a URL into a ParsedUrl.

    Returns None if the URL cannot be parsed at all (unbalanced IPv6
    brackets, non-numeric port). Host is lowercased.
    """
    if url is None:
        return None

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None

    return ParsedUrl(
        scheme=parts.scheme or None,
        user=parts.username or None,
        password=parts.password or None,
        host=parts.hostname or None,
        port=port,
        path=parts.path or None,
        query=parts.query or None,
        fragment=parts.fragment or None,
    )


def build_url(parsed: ParsedUrl) -> str:
    """
    Rebuild a URL string from a ParsedUrl.

    Absent components are left out. mailto: URLs get no "//", and a
    relative path only gets a leading "/" when it follows a host.
    """
    uri = ""
    has_authority = bool(parsed.user or parsed.host or parsed.port)
    if parsed.scheme:
        uri = parsed.scheme + ":" + ("" if parsed.scheme.lower() == "mailto" else "//")
    if parsed.user:
        uri += parsed.user
        if parsed.password:
            uri += ":" + parsed.password
        uri += "@"
    if parsed.host:
        # IPv6 literals lose their brackets in parse_url()
        uri += f"[{parsed.host}]" if ":" in parsed.host else parsed.host
    if parsed.port:
        uri += f":{parsed.port}"

    if parsed.path:
        if parsed.path.startswith("/"):
            uri += parsed.path
        else:
            uri += ("/" if has_authority else "") + parsed.path

    if parsed.query:
        uri += "?" + parsed.query
    if parsed.fragment:
        uri += "#" + parsed.fragment
    return uri


def get_path_and_query(url: str) -> str:
    """
    Get the path (without its leading "/") and query of a URL.

    Examples:
        >>> get_path_and_query("http://example.org/test/index.php?module=Home")
        'test/index.php?module=Home'
    """
    parsed = parse_url(url)
    if parsed is None:
        return ""

    result = ""
    if parsed.path:
        result += parsed.path[1:]
    if parsed.query:
        result += "?" + parsed.query
    return result


@functools.cache
def _lossy_rules(country_codes: frozenset[str]) -> tuple[tuple[re.Pattern, str], ...]:
    """Compile the ordered lossy host rules for a set of country codes."""
    countries = "|".join(sorted(country_codes))
    second_level = "|".join(LOSSY_SECOND_LEVEL)
    return (
        # www., www2., search.
        (re.compile(r"^(w+[0-9]*|search)\."), ""),
        # mobile sub-domain
        (re.compile(r"(^|\.)m\."), r"\1"),
        # country TLD, optionally behind a generic second level (co.uk)
        (re.compile(rf"(\.({second_level}))?\.({countries})(/|$)"), r".{}\4"),
        # country sub-domain
        (re.compile(rf"(^|\.)({countries})\."), r"\1{}."),
    )


def get_lossy_host(host: str, country_codes: frozenset[str] | None = None) -> str:
    """
    Reduce a host to its lossy form.

    Two-letter country codes are replaced by "{}" while common
    non-semantic prefixes (www., search., m.) are removed. Rules are
    applied in order, each on the output of the previous one.

    Args:
        host: Host name (a host followed by a path also works)
        country_codes: Override of the two-letter codes to collapse

    Returns:
        The lossy host
    """
    for pattern, replacement in _lossy_rules(frozenset(country_codes or COUNTRY_CODES)):
        host = pattern.sub(replacement, host)
    return host


def looks_like_url(text: str) -> bool:
    """
    Check whether a string may be a URL.

    Loose check: any non-empty text after "://" and an optional known scheme.
    """
    if not text:
        return False
    match = _URL_LIKE.match(text)
    return match is not None and len(match.group(2)) > 0
