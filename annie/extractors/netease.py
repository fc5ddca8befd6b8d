"""MV and video extractor for music.163.com."""

from __future__ import annotations

from urllib.parse import unquote_plus

from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    content_size,
    fetch,
    match_one_of,
)
from annie.types import URL, Data, Stream

SITE = "网易云音乐 music.163.com"


def extract(url: str) -> list[Data]:
    """Extract a netease music MV or video."""
    url = url.replace("/#/", "/", 1)
    if match_one_of(url, r"/(mv|video)\?id=(\w+)") is None:
        raise ExtractorError("invalid url for netease music")

    html = fetch(url, url)
    if "u-errlg-404" in html:
        raise ExtractorError("404 music not found")

    titles = match_one_of(html, r'<meta property="og:title" content="(.+?)" />')
    if titles is None:
        raise URLParseFailed()
    found = match_one_of(html, r'<meta property="og:video" content="(.+?)" />')
    if found is None:
        raise URLParseFailed()
    real_url = unquote_plus(found[1])

    size = content_size(real_url, url)
    streams = {"default": Stream(urls=[URL(url=real_url, size=size, ext="mp4")], size=size)}
    return [Data(site=SITE, title=titles[1], type="video", streams=streams, url=url)]