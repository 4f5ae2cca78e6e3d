"""Tests for search engine and keyword detection."""

import logging

import pytest

from search_referrer.classifier import SearchEngineMatch, detect_search_engine
from search_referrer.registry import SearchEngineRegistry


class TestSearchEngineDetection:
    """Test detection of common search engines."""

    def test_google_keyword(self):
        match = detect_search_engine("http://www.google.com/search?q=piwik+analytics")
        assert match == SearchEngineMatch(name="Google", keyword="piwik analytics")
        assert match.has_keyword is True

    def test_google_country_domain(self):
        match = detect_search_engine("https://www.google.co.uk/search?hl=en&q=web+analytics")
        assert match == SearchEngineMatch(name="Google", keyword="web analytics")

    def test_google_without_keyword_parameter(self):
        assert detect_search_engine("http://www.google.com/partners.html") is None

    def test_keyword_in_fragment(self):
        match = detect_search_engine("http://www.google.com/#hl=en&q=piwik")
        assert match == SearchEngineMatch(name="Google", keyword="piwik")

    def test_second_keyword_parameter(self):
        match = detect_search_engine("http://www.bing.com/search?Q=Piwik")
        assert match == SearchEngineMatch(name="Bing", keyword="piwik")

    def test_host_and_path_rule(self):
        match = detect_search_engine("http://www.bing.com/images/search?q=cats&FORM=HDRSC2")
        assert match == SearchEngineMatch(name="Bing Images", keyword="cats")

    def test_alias_entry_uses_primary_parameters(self):
        match = detect_search_engine("http://de.ask.com/web?q=suchmaschine")
        assert match == SearchEngineMatch(name="Ask", keyword="suchmaschine")

    def test_regex_keyword(self):
        url = (
            "http://webcache.googleusercontent.com/search"
            "?q=cache:ABCDEFGHIJKL:www.example.com/page+piwik+analytics&cd=1&hl=en"
        )
        match = detect_search_engine(url)
        assert match == SearchEngineMatch(name="Google", keyword="piwik analytics")

    def test_keyword_trimmed_and_lowercased(self):
        match = detect_search_engine("http://www.google.com/search?q=+QUErY+test!+")
        assert match.keyword == "query test!"

    def test_non_ascii_lowercased(self):
        match = detect_search_engine("http://www.google.fr/search?q=%C3%89T%C3%89")
        assert match.keyword == "été"

    def test_idempotent(self):
        url = "http://www.google.com/search?q=piwik+analytics"
        assert detect_search_engine(url) == detect_search_engine(url)


class TestNoMatch:
    """Test referrers that are not search engines."""

    @pytest.mark.parametrize("url", [
        "",
        None,
        "not a url",
        "www.google.com/search?q=piwik",
        "http://example.com/?q=piwik",
        "http://[::1/search?q=x",
        "http://www.bing.com/",
    ])
    def test_no_match(self, url):
        assert detect_search_engine(url) is None


class TestFallbacks:
    """Test detection of hosts missing from the definitions table."""

    def test_google_custom_search(self):
        url = "http://www.example.com/results.html?cx=partner-pub-1234567890:abcdefgh&q=piwik"
        match = detect_search_engine(url)
        assert match == SearchEngineMatch(name="Google Custom Search", keyword="piwik")

    def test_infospace_private_label(self):
        url = (
            "http://www.example.org/pemonitorhosted/ws/results/Web/"
            "piwik%20analytics/1/417/TopNavigation/Relevance/"
        )
        match = detect_search_engine(url)
        assert match == SearchEngineMatch(name="InfoSpace", keyword="piwik analytics")

    def test_yahoo_images(self):
        url = "http://xyz1.images.search.yahoo.com/search/images?p=cats"
        match = detect_search_engine(url)
        assert match == SearchEngineMatch(name="Yahoo! Images", keyword="cats")

    def test_yahoo(self):
        url = "http://xyz1.search.yahoo.com/search?p=piwik"
        match = detect_search_engine(url)
        assert match == SearchEngineMatch(name="Yahoo!", keyword="piwik")


class TestNoKeywordEngines:
    """Test engines known to hide the keyword."""

    def test_google_empty_q(self):
        match = detect_search_engine("http://www.google.com/search?q=")
        assert match == SearchEngineMatch(name="Google", keyword="")
        assert match.has_keyword is False

    def test_google_empty_q_after_other_parameters(self):
        url = "http://www.google.com/url?sa=t&rct=j&q=&esrc=s&source=web"
        assert detect_search_engine(url) == SearchEngineMatch(name="Google", keyword="")

    def test_google_host_only(self):
        assert detect_search_engine("https://www.google.com/") == SearchEngineMatch(name="Google", keyword="")
        assert detect_search_engine("https://www.google.de") == SearchEngineMatch(name="Google", keyword="")

    def test_google_other_page_without_q(self):
        assert detect_search_engine("http://www.google.com/search?hl=en") is None

    def test_duckduckgo_empty_q(self):
        match = detect_search_engine("https://duckduckgo.com/?q=")
        assert match == SearchEngineMatch(name="DuckDuckGo", keyword="")

    def test_duckduckgo_without_q(self):
        match = detect_search_engine("https://duckduckgo.com/")
        assert match == SearchEngineMatch(name="DuckDuckGo", keyword="")

    def test_other_engine_empty_q_is_no_match(self):
        assert detect_search_engine("http://www.ecosia.org/search?q=") is None


class TestGoogleSpecialCases:
    """Test Google Images, advanced search and vertical detection."""

    def test_images_prev_parameter(self):
        url = (
            "http://www.google.com/imgres?imgurl=http://example.com/logo.png"
            "&imgrefurl=http://example.com/&prev=/images%3Fq%3Dpiwik%2Blogo%26hl%3Den"
        )
        match = detect_search_engine(url)
        assert match == SearchEngineMatch(name="Google Images", keyword="piwik logo")

    def test_images_without_keyword(self):
        match = detect_search_engine("http://images.google.com/imgres?imgurl=http://example.com/a.png")
        assert match == SearchEngineMatch(name="Google Images", keyword="")

    def test_images_host(self):
        match = detect_search_engine("http://images.google.de/images?q=Logo&hl=de")
        assert match == SearchEngineMatch(name="Google Images", keyword="logo")

    def test_advanced_search(self):
        url = "http://www.google.com/search?as_q=foo&as_oq=bar+baz"
        assert detect_search_engine(url) == SearchEngineMatch(name="Google", keyword="foo bar OR baz")

    def test_advanced_search_all_fields(self):
        url = (
            "http://www.google.com/search?hl=en&as_q=Piwik&as_epq=web+analytics"
            "&as_oq=open+source&as_eq=spam"
        )
        match = detect_search_engine(url)
        assert match.keyword == 'piwik open OR source "web analytics" -spam'

    def test_advanced_search_empty_fields_fall_back_to_q(self):
        url = "http://www.google.com/search?as_q=&as_epq=&q=piwik"
        assert detect_search_engine(url) == SearchEngineMatch(name="Google", keyword="piwik")

    @pytest.mark.parametrize("tbm,name", [
        ("isch", "Google Images"),
        ("vid", "Google Video"),
        ("shop", "Google Shopping"),
        ("nws", "Google"),
    ])
    def test_top_bar_menu(self, tbm, name):
        match = detect_search_engine(f"http://www.google.com/search?tbm={tbm}&q=cats")
        assert match == SearchEngineMatch(name=name, keyword="cats")

    def test_image_vertical_without_keyword(self):
        match = detect_search_engine("http://www.google.com/search?tbm=isch&q=")
        assert match == SearchEngineMatch(name="Google Images", keyword="")


class TestCharsets:
    """Test keyword charset conversion."""

    def test_windows_1251(self):
        # "ПРИВЕТ" in windows-1251
        match = detect_search_engine("http://yandex.ru/yandsearch?text=%CF%D0%C8%C2%C5%D2")
        assert match == SearchEngineMatch(name="Yandex", keyword="привет")

    def test_utf8_preferred_when_valid(self):
        url = "http://www.yandex.ru/yandsearch?text=%D0%BF%D1%80%D0%B8%D0%B2%D0%B5%D1%82"
        assert detect_search_engine(url).keyword == "привет"

    def test_gb2312(self):
        # "中文" in GB2312
        match = detect_search_engine("http://www.baidu.com/s?wd=%D6%D0%CE%C4")
        assert match == SearchEngineMatch(name="Baidu", keyword="中文")

    def test_comma_separated_charsets(self):
        match = detect_search_engine("http://www.sogou.com/web?query=%D6%D0%CE%C4")
        assert match == SearchEngineMatch(name="Sogou", keyword="中文")

    def test_invalid_utf8_without_charsets(self):
        match = detect_search_engine("http://www.google.com/search?q=%E9t%E9")
        assert match.name == "Google"
        assert "t" in match.keyword

    def test_single_charset(self):
        registry = SearchEngineRegistry.from_definitions({
            "example.com": ("Example", "q", None, "windows-1251"),
        })
        match = detect_search_engine("http://example.com/?q=%CF%D0%C8%C2%C5%D2", registry=registry)
        assert match.keyword == "привет"

    def test_no_charset_matches_uses_first(self, caplog):
        # Invalid under both; ascii keeps the "x", UTF-8 would also keep "п"
        registry = SearchEngineRegistry.from_definitions({
            "example.com": ("Example", "q", None, ["ascii", "UTF-8"]),
        })
        with caplog.at_level(logging.DEBUG, logger="search_referrer.classifier"):
            match = detect_search_engine("http://example.com/?q=%D0%BFx%FF", registry=registry)
        assert match.keyword == "x"
        assert "No charset" in caplog.text

    def test_unknown_charset_keeps_keyword(self):
        registry = SearchEngineRegistry.from_definitions({
            "example.com": ("Example", "q", None, "x-no-such-charset"),
        })
        match = detect_search_engine("http://example.com/?q=Piwik", registry=registry)
        assert match.keyword == "piwik"


class TestCustomRegistry:
    """Test detection against a caller-supplied registry."""

    def test_pattern_without_group_is_skipped(self):
        registry = SearchEngineRegistry.from_definitions({
            "example.com": ("Example", ["/nogroup/", "q"]),
        })
        match = detect_search_engine("http://example.com/nogroup?q=test", registry=registry)
        assert match == SearchEngineMatch(name="Example", keyword="test")

    def test_first_matching_pattern_wins(self):
        registry = SearchEngineRegistry.from_definitions({
            "example.com": ("Example", ["/\\/find\\/([^\\/?]+)/", "q"]),
        })
        match = detect_search_engine("http://example.com/find/First?q=second", registry=registry)
        assert match.keyword == "first"

    def test_unknown_host(self):
        registry = SearchEngineRegistry.from_definitions({"example.com": ("Example", "q")})
        assert detect_search_engine("http://www.google.com/search?q=x", registry=registry) is None
