"""
Query string parsing and serialization.

Referrer URLs are often malformed, so this module does not use
urllib.parse.parse_qs: it keeps parameter order, keeps bare flags
(``?debug``) apart from empty values (``?debug=``), and understands
PHP-style array parameters (``tag[]=a&tag[]=b``), literal or percent-encoded.

Values are returned still percent-encoded. Decoding is left to the caller
since search engines disagree on charsets.
"""

import html
import re

from .sanitize import sanitize_input_value

# A parsed parameter value: text, None for a bare flag, or a list for name[]
QueryValue = str | None | list[str | None]

QUERY_SEPARATOR = "&"

_ARRAY_SUFFIX = re.compile(r"(\[|%5b)(\]|%5d)$", re.IGNORECASE)

# Characters that would end a name or value early when written back
_QUERY_RESERVED = (("&", "%26"), ("#", "%23"))


def parse_query_string(query: str) -> dict[str, QueryValue]:
    """
    Parse a raw query string into an ordered name -> value mapping.

    Args:
        query: Query string, with or without its leading "?"

    Returns:
        Dict in first-seen order. Bare flags map to None, array
        parameters map to a list of values.

    Examples:
        >>> parse_query_string("?q=piwik&debug&tag[]=a&tag%5B%5D=b")
        {'q': 'piwik', 'debug': None, 'tag': ['a', 'b']}
    """
    if not query:
        return {}
    if query[0] == "?":
        query = query[1:]

    params: dict[str, QueryValue] = {}

    for token in query.strip().split(QUERY_SEPARATOR):
        name, sep, value = token.partition("=")
        parsed_value: str | None = value if sep else None

        if name:
            name = sanitize_input_value(name)
        if parsed_value:
            parsed_value = sanitize_input_value(parsed_value)

        stripped, count = _ARRAY_SUFFIX.subn("", name)
        if stripped and count:
            current = params.get(stripped)
            if not isinstance(current, list):
                current = []
                params[stripped] = current
            current.append(parsed_value)
        elif name:
            params[name] = parsed_value

    return params


def _encode_component(text: str) -> str:
    """Undo the HTML escaping of a parsed name or value for the wire."""
    text = html.unescape(text)
    for char, encoded in _QUERY_RESERVED:
        text = text.replace(char, encoded)
    return text


def build_query_string(
    params: dict[str, QueryValue],
    exclude: frozenset[str] | set[str] | tuple[str, ...] = (),
) -> str:
    """
    Serialize a parameter mapping back into a query string.

    Names and values are written back unescaped, except "&" and "#" which
    are percent-encoded, so that parsing the result gives the same mapping.

    Args:
        params: Mapping as returned by parse_query_string()
        exclude: Lowercased parameter names to leave out

    Returns:
        Query string without leading "?"
    """
    parts: list[str] = []

    for name, value in params.items():
        # Encoded brackets are compared (and emitted) decoded
        name = name.replace("%5B", "[").replace("%5D", "]")
        if name.lower() in exclude:
            continue
        name = _encode_component(name)

        if isinstance(value, list):
            for item in value:
                if item is None:
                    parts.append(f"{name}[]")
                else:
                    parts.append(f"{name}[]={_encode_component(item)}")
        elif value is None:
            parts.append(name)
        else:
            parts.append(f"{name}={_encode_component(value)}")

    return QUERY_SEPARATOR.join(parts)


def get_parameter(query: str, name: str, default: QueryValue = None) -> QueryValue:
    """
    Get one parameter from a raw query string.

    A bare flag (``?debug``) gives None, a missing parameter gives
    ``default``. Pass a default other than None to tell the two apart.
    An empty string means the parameter was present with an empty value.

    Examples:
        >>> get_parameter("debug&q=x", "debug", default="")
        >>> get_parameter("q=x", "debug", default="")
        ''
    """
    return parse_query_string(query).get(name, default)
