"""Unit tests for text and cookie helpers."""
from video_pipeline.utils.cookies import build_cookie_header, cookie_names
from video_pipeline.utils.text import clean_text, count_words, extract_hashtags, extract_mentions


class TestTextHelpers:
    """Test hashtag, mention and entity helpers."""

    def test_extract_hashtags(self):
        text = "Morning routine #fyp #GetReady_2024 and more #fyp"
        assert extract_hashtags(text) == ["fyp", "GetReady_2024", "fyp"]

    def test_extract_mentions(self):
        text = "Collab with @jane.doe and @john_smith!"
        assert extract_mentions(text) == ["jane.doe", "john_smith"]

    def test_empty_text(self):
        assert extract_hashtags("") == []
        assert extract_mentions(None) == []
        assert clean_text(None) == ""

    def test_clean_text_unescapes_entities(self):
        raw = "  Tom &amp; Jerry say &quot;hi&quot; &#39;now&#39; &lt;3 &gt;  "
        assert clean_text(raw) == "Tom & Jerry say \"hi\" 'now' <3 >"

    def test_clean_text_unescapes_once(self):
        assert clean_text("&amp;quot;") == "&quot;"

    def test_count_words(self):
        assert count_words("one  two\nthree") == 3
        assert count_words("") == 0


class TestCookieHelpers:
    """Test cookie header normalization."""

    def test_header_string_passthrough(self):
        assert build_cookie_header(" a=1; b=2 ") == "a=1; b=2"

    def test_list_of_pairs(self):
        cookies = [{"name": "sessionid", "value": "abc"}, {"name": "tt_csrf", "value": "x"}, {"value": "orphan"}]
        assert build_cookie_header(cookies) == "sessionid=abc; tt_csrf=x"

    def test_mapping(self):
        assert build_cookie_header({"a": "1", "b": None}) == "a=1; b="

    def test_nothing_usable(self):
        assert build_cookie_header(None) is None
        assert build_cookie_header("   ") is None
        assert build_cookie_header(42) is None

    def test_cookie_names(self):
        assert cookie_names("sessionid=abc; tt_csrf=x") == ["sessionid", "tt_csrf"]
        assert cookie_names(None) == []
