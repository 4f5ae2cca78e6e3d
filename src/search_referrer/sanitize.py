"""
Sanitization of untrusted referrer input.

Query names and values come straight from the Referer header, so they are
cleaned before anything else touches them. Escaping happens on the raw
(still percent-encoded) text: encoded characters survive untouched and are
decoded later by the keyword extractor.
"""

import html

# Control characters that never belong in a query token
STRIPPED_CHARACTERS = ("\0", "\r", "\n")


def sanitize_input_value(value: str) -> str:
    """
    Clean a single query-string name or value.

    - Strip surrounding whitespace
    - Remove NUL, CR and LF characters
    - HTML-escape & < > " ' (entities are decoded first, so cleaning
      an already clean value changes nothing)
    """
    cleaned = html.unescape(value).strip()
    for char in STRIPPED_CHARACTERS:
        cleaned = cleaned.replace(char, "")
    return html.escape(cleaned, quote=True)
