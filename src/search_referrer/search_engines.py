"""
Search engine definitions.

Each entry maps a host (optionally followed by a path) to a tuple of:

    (name, keyword_parameters, search_url_template, charsets)

- name: Display name of the search engine. The first entry declared for a
  name is its primary entry.
- keyword_parameters: A query parameter name, a regular expression written
  as /pattern/ whose first group captures the keyword, or a list of those
  tried in order. Entries that only give a name reuse the keyword
  parameters of the primary entry.
- search_url_template: Result page path for a keyword ({k}), relative to
  the entry's host unless it starts with http.
- charsets: Charsets the engine may send keywords in, in order of
  preference (list or comma-separated string).

Hosts use the lossy form where an engine runs on many country domains:
"google.{}" matches google.de, google.co.uk, google.com.au, etc.
"""

SEARCH_ENGINES: dict[str, tuple] = {
    # =========================================================================
    # Google
    # =========================================================================
    "google.com": ("Google", ["q", "query"], "search?q={k}"),
    "google.{}": ("Google",),
    "{}.google.com": ("Google",),
    "encrypted.google.com": ("Google",),
    "webcache.googleusercontent.com": (
        "Google",
        ["/cache:[0-9A-Za-z_-]{12}:[^+]+\\+([^&]+)/"],
    ),
    "google.com/cse": ("Google Custom Search", ["q", "query"], "cse?q={k}"),
    "google.{}/cse": ("Google Custom Search",),
    "images.google.com": ("Google Images", ["q"], "images?q={k}"),
    "images.google.{}": ("Google Images",),
    "video.google.com": ("Google Video", ["q"], "search?tbm=vid&q={k}"),
    "news.google.com": ("Google News", ["q"], "search?q={k}"),
    "news.google.{}": ("Google News",),
    "blogsearch.google.com": ("Google Blogsearch", ["q"], "blogsearch?q={k}"),
    "google.interia.{}": ("Google (Interia)", ["q"], "szukaj?q={k}", ["UTF-8", "iso-8859-2"]),

    # =========================================================================
    # Microsoft
    # =========================================================================
    "bing.com": ("Bing", ["q", "Q"], "search?q={k}"),
    "{}.bing.com": ("Bing",),
    "bing.com/images/search": ("Bing Images", ["q", "Q"], "images/search?q={k}"),
    "{}.bing.com/images/search": ("Bing Images",),
    "bing.com/videos/search": ("Bing Videos", ["q", "Q"], "videos/search?q={k}"),

    # =========================================================================
    # Yahoo!
    # =========================================================================
    "search.yahoo.com": ("Yahoo!", ["p", "q"], "search?p={k}"),
    "yahoo.com": ("Yahoo!",),
    "{}.search.yahoo.com": ("Yahoo!",),
    "images.search.yahoo.com": ("Yahoo! Images", ["p", "va"], "search/images?p={k}"),
    "{}.images.search.yahoo.com": ("Yahoo! Images",),
    "video.search.yahoo.com": ("Yahoo! Video", ["p"], "search/video?p={k}"),
    "search.yahoo.co.jp": (
        "Yahoo! Japan",
        ["p", "va"],
        "search?p={k}",
        ["UTF-8", "EUC-JP", "Shift_JIS"],
    ),

    # =========================================================================
    # Privacy-focused and independent engines
    # =========================================================================
    "duckduckgo.com": ("DuckDuckGo", ["q"], "?q={k}"),
    "ecosia.org": ("Ecosia", ["q"], "search?q={k}"),
    "qwant.com": ("Qwant", ["q"], "?q={k}"),
    "lite.qwant.com": ("Qwant",),
    "startpage.com": ("Startpage", ["query", "q"], "do/search?query={k}"),
    "ixquick.com": ("Ixquick", ["query"], "do/search?query={k}"),
    "search.brave.com": ("Brave Search", ["q"], "search?q={k}"),
    "mojeek.com": ("Mojeek", ["q"], "search?q={k}"),
    "blekko.com": ("blekko", ["q"], "ws/{k}"),

    # =========================================================================
    # Portals and meta search
    # =========================================================================
    "ask.com": ("Ask", ["ask", "q", "searchfor"], "web?q={k}"),
    "{}.ask.com": ("Ask",),
    "search.aol.com": ("AOL", ["query", "q"], "aol/search?q={k}"),
    "aolsearch.com": ("AOL",),
    "search.lycos.com": ("Lycos", ["query", "q"], "web/?q={k}"),
    "search.conduit.com": ("Conduit.com", ["q"], "Results.aspx?q={k}"),
    "search.babylon.com": ("Babylon", ["q"], "?q={k}"),
    "infospace.com": ("InfoSpace", ["q", "qkw"], "search/web?q={k}"),
    "wsdsold.infospace.com": (
        "InfoSpace",
        ["/\\/pemonitorhosted\\/ws\\/results\\/[^\\/]+\\/([^\\/?&]+)/"],
    ),
    "bt.com": ("BT", ["p", "q"], "search?p={k}"),
    "amazon.com": ("Amazon", ["keywords", "field-keywords"], "s/?field-keywords={k}"),
    "amazon.{}": ("Amazon",),

    # =========================================================================
    # Regional engines
    # =========================================================================
    "baidu.com": ("Baidu", ["wd", "word", "kw", "k"], "s?wd={k}", ["UTF-8", "GB2312"]),
    "image.baidu.com": ("Baidu Images", ["word"], "i?word={k}", ["UTF-8", "GB2312"]),
    "sogou.com": ("Sogou", ["query"], "web?query={k}", "UTF-8,GB2312"),
    "yandex.ru": ("Yandex", ["text"], "yandsearch?text={k}", ["UTF-8", "windows-1251"]),
    "yandex.{}": ("Yandex", None, None, ["UTF-8", "windows-1251"]),
    "yandex.com": ("Yandex",),
    "images.yandex.{}": ("Yandex Images", ["text"], "images/search?text={k}", ["UTF-8", "windows-1251"]),
    "nova.rambler.{}": ("Rambler", ["query", "words"], "search?query={k}", ["UTF-8", "windows-1251"]),
    "go.mail.{}": ("Mailru", ["q"], "search?q={k}", ["UTF-8", "windows-1251"]),
    "naver.com": ("Naver", ["query"], "search.naver?query={k}"),
    "daum.net": ("Daum", ["q"], "search?q={k}", ["UTF-8", "EUC-KR"]),
    "seznam.{}": ("Seznam", ["q"], "?q={k}"),
    "szukaj.onet.{}": ("Onet.pl", ["qt", "q"], "query.html?qt={k}", ["UTF-8", "iso-8859-2"]),
    "szukaj.wp.{}": ("Wirtualna Polska", ["szukaj", "q"], "szukaj.html?szukaj={k}", ["UTF-8", "iso-8859-2"]),
    "walla.{}": ("Walla", ["q"], "?q={k}", ["UTF-8", "windows-1255"]),
    "arianna.libero.{}": ("Arianna", ["query"], "search/abin/integrata.cgi?query={k}"),
    "coccoc.com": ("Coc Coc", ["query"], "search#query={k}"),
}
