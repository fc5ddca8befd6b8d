"""Video and playlist extractor for tangdou.com."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import requests

from annie.config import config
from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    content_size,
    fetch,
    match_all,
    match_one_of,
)
from annie.types import URL, Data, Stream, empty_data

SITE = "糖豆广场舞 tangdou.com"
REFERER = "http://www.tangdou.com/html/playlist/view/4173"


def _wanted_items(count: int) -> list[int]:
    """One-based positions of the playlist items selected by the configuration."""
    if config.items:
        wanted: set[int] = set()
        for piece in config.items.split(","):
            piece = piece.strip()
            if not piece:
                continue
            if "-" in piece:
                low, high = piece.split("-", 1)
                wanted.update(range(int(low), int(high) + 1))
            else:
                wanted.add(int(piece))
        return sorted(item for item in wanted if 1 <= item <= count)
    start = max(config.item_start or 1, 1)
    end = min(config.item_end or count, count)
    return list(range(start, end + 1))


def _real_url(html: str, uri: str) -> str:
    found = match_one_of(html, r"video:'(.+?)'", r'video:"(.+?)"', r'<video.*src="(.+?)"')
    if found is not None:
        return found[1]
    share = match_one_of(html, r'<div class="video">\s*<script src="(.+?)"')
    if share is None:
        raise URLParseFailed()
    signed = fetch(share[1], uri)
    found = match_one_of(signed, r'src=\\"(.+?)\\"')
    if found is None:
        raise URLParseFailed()
    return found[1]


def _extract_one(uri: str) -> Data:
    try:
        html = fetch(uri, REFERER)
        titles = match_one_of(
            html,
            r'<div class="title">(.+?)</div>',
            r'<meta name="description" content="(.+?)"',
            r"<title>(.+?)</title>",
        )
        if titles is None:
            raise URLParseFailed()
        real_url = _real_url(html, uri)
        size = content_size(real_url, uri)
    except (ExtractorError, requests.RequestException) as exc:
        return empty_data(uri, exc)

    streams = {"default": Stream(urls=[URL(url=real_url, size=size, ext="mp4")], size=size)}
    return Data(site=SITE, title=titles[1], type="video", streams=streams, url=uri)


def extract(uri: str) -> list[Data]:
    """Extract one video, or the selected videos of a playlist in playlist mode.

    Failures of single items are recorded in the err field of their Data.
    """
    if not config.playlist:
        return [_extract_one(uri)]

    html = fetch(uri, REFERER)
    found = match_all(html, r'<a target="tdplayer" href="(.+?)" class="title">')
    wanted = set(_wanted_items(len(found)))
    targets = [
        match[1] for position, match in enumerate(found, 1) if position in wanted
    ]
    with ThreadPoolExecutor(max_workers=max(1, config.thread_number)) as pool:
        return list(pool.map(_extract_one, targets))