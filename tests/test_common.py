import pytest
import responses

from annie.config import FAKE_HEADERS, config
from annie.extractors.common import (
    ExtractorError,
    LoginRequired,
    URLParseFailed,
    content_size,
    fetch,
    fetch_bytes,
    m3u8_urls,
    match_all,
    match_one_of,
    name_and_ext,
    page_title,
)


@pytest.fixture(autouse=True)
def _clean_config():
    config.reset()
    yield
    config.reset()


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_error_messages():
    assert str(URLParseFailed()) == "url parse failed"
    assert str(LoginRequired()) == "login required"
    assert isinstance(URLParseFailed(), ExtractorError)


def test_match_one_of_first_matching_pattern():
    text = "page vid: 'abc123' end"
    result = match_one_of(text, r"vid=(\w+)", r"vid:\s*'(\w+)'")
    assert result == ["vid: 'abc123'", "abc123"]


def test_match_one_of_no_match():
    assert match_one_of("nothing here", r"vid=(\w+)") is None


def test_match_one_of_optional_group_empty():
    result = match_one_of("id=7", r"id=(\d+)(x)?")
    assert result == ["id=7", "7", ""]


def test_match_all():
    text = "#EXT-MGTV-File-SIZE:1893724\nseg\n#EXT-MGTV-File-SIZE:42\n"
    result = match_all(text, r"#EXT-MGTV-File-SIZE:(\d+)")
    assert result == [
        ["#EXT-MGTV-File-SIZE:1893724", "1893724"],
        ["#EXT-MGTV-File-SIZE:42", "42"],
    ]


def test_fetch_sends_headers(mocked):
    mocked.add(responses.GET, "https://example.com/page", body="héllo")
    config.cookie = "token"
    text = fetch("https://example.com/page", "https://example.com/")
    assert text == "héllo"
    sent = mocked.calls[0].request.headers
    assert sent["Referer"] == "https://example.com/"
    assert sent["Cookie"] == "token"
    assert sent["User-Agent"] == FAKE_HEADERS["User-Agent"]
    assert sent["Accept-Charset"] == "UTF-8,*;q=0.5"


def test_fetch_extra_headers_override(mocked):
    mocked.add(responses.GET, "https://example.com/raw", body=b"\x00\x01")
    body = fetch_bytes("https://example.com/raw", "", {"Accept-Encoding": "identity"})
    assert body == b"\x00\x01"
    sent = mocked.calls[0].request.headers
    assert sent["Accept-Encoding"] == "identity"
    assert "Cookie" not in sent


def test_content_size(mocked):
    mocked.add(
        responses.GET,
        "https://example.com/v.mp4",
        body=b"abcde",
        auto_calculate_content_length=True,
    )
    assert content_size("https://example.com/v.mp4", "https://example.com/") == len(b"abcde")


def test_m3u8_urls_resolves_relative(mocked):
    playlist = "#EXTM3U\n#EXTINF:10,\nseg1.ts\n\nhttps://cdn.example.com/seg2.ts\n"
    mocked.add(responses.GET, "https://example.com/hls/index.m3u8", body=playlist)
    assert m3u8_urls("https://example.com/hls/index.m3u8") == [
        "https://example.com/hls/seg1.ts",
        "https://cdn.example.com/seg2.ts",
    ]


def test_name_and_ext_from_path():
    assert name_and_ext("https://example.com/a/video.mp4?x=1") == ("video", "mp4")


def test_name_and_ext_from_content_type(mocked):
    url = "https://example.com/post/picture.jpg/w650"
    mocked.add(responses.GET, url, body=b"img", content_type="image/jpeg")
    assert name_and_ext(url) == ("w650", "jpeg")


def test_name_and_ext_invalid_url():
    with pytest.raises(ExtractorError):
        name_and_ext("not a url")


def test_page_title_prefers_title_tag():
    html = "<html><head><title> My Page </title></head><body><h1>Head</h1></body></html>"
    assert page_title(html) == "My Page"


def test_page_title_falls_back_to_og_title():
    html = '<html><head><meta property="og:title" content="Shared"></head></html>'
    assert page_title(html) == "Shared"


def test_page_title_falls_back_to_h1():
    assert page_title("<html><body><h1>Heading</h1></body></html>") == "Heading"