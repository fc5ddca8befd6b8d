"""Video extractor for v.douyu.com."""

from __future__ import annotations

import json

from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    content_size,
    fetch,
    m3u8_urls,
    match_one_of,
)
from annie.types import URL, Data, Stream

SITE = "斗鱼 douyu.com"
_INFO_API = "http://vmobile.douyu.com/video/getInfo?vid="


def _segments(playlist: str) -> list[URL]:
    return [
        URL(url=address, size=content_size(address, playlist), ext="ts")
        for address in m3u8_urls(playlist)
    ]


def _video_url(raw: str) -> str:
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return ""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        return ""
    return payload["data"].get("video_url") or ""


def extract(url: str) -> list[Data]:
    """Extract a douyu video; live rooms are not supported."""
    if match_one_of(url, r"https?://www.douyu.com/(\S+)") is not None:
        raise ExtractorError("暂不支持斗鱼直播")

    html = fetch(url, url)
    titles = match_one_of(html, r"<title>(.*?)</title>")
    if titles is None:
        raise URLParseFailed()
    title = titles[1]

    vids = match_one_of(url, r"https?://v.douyu.com/show/(\S+)")
    if vids is None:
        raise URLParseFailed()

    playlist = _video_url(fetch(_INFO_API + vids[1], url))
    urls = _segments(playlist)
    streams = {"default": Stream(urls=urls, size=sum(item.size for item in urls))}
    return [Data(site=SITE, title=title, type="video", streams=streams, url=url)]