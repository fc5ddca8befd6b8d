"""Video extractor for mgtv.com."""

from __future__ import annotations

import base64
import json
import time
from typing import Any

from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    fetch,
    fetch_bytes,
    m3u8_urls,
    match_all,
    match_one_of,
)
from annie.types import URL, Data, Stream

SITE = "芒果TV mgtv.com"
_VIDEO_API = "https://pcweb.api.mgtv.com/player/video"
_SOURCE_API = "https://pcweb.api.mgtv.com/player/getSource"
_CLIENT = "did=f11dee65-4e0d-4d25-bfce-719ad9dc991d|pno=1030|ver=5.5.1|"
_HEADERS = {"Cookie": "PM_CHKID=1"}


def encode_tk2(text: str) -> str:
    """Reversed base64 of text, as the player API expects."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")[::-1]


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _decode(raw: str | bytes) -> dict[str, Any]:
    try:
        return _as_dict(json.loads(raw))
    except json.JSONDecodeError as exc:
        raise ExtractorError(f"invalid response: {exc}") from exc


def _segments(playlist: str) -> list[URL]:
    addresses = m3u8_urls(playlist)
    sizes = match_all(fetch(playlist, playlist), r"#EXT-MGTV-File-SIZE:(\d+)")
    if len(sizes) < len(addresses):
        raise URLParseFailed()
    return [
        URL(url=address, size=int(size[1]), ext="ts")
        for address, size in zip(addresses, sizes)
    ]


def extract(url: str) -> list[Data]:
    """Extract every definition of an mgtv video."""
    html = fetch(url, url)
    vid = match_one_of(
        url,
        r"https?://www.mgtv.com/(?:b|l)/\d+/(\d+).html",
        r"https?://www.mgtv.com/hz/bdpz/\d+/(\d+).html",
    ) or match_one_of(html, r"vid: (\d+),")
    if vid is None:
        raise URLParseFailed()

    clit = f"clit={int(time.time()) // 1000}"
    pm2 = _decode(
        fetch(
            f"{_VIDEO_API}?video_id={vid[1]}&tk2={encode_tk2(_CLIENT + clit)}",
            url,
            _HEADERS,
        )
    )
    pm2_data = _as_dict(pm2.get("data"))
    pm2_value = _as_dict(pm2_data.get("atc")).get("pm2", "")

    source = _decode(
        fetch(
            f"{_SOURCE_API}?video_id={vid[1]}&tk2={encode_tk2(clit)}&pm2={pm2_value}",
            url,
            _HEADERS,
        )
    )
    source_data = _as_dict(source.get("data"))

    info = _as_dict(pm2_data.get("info"))
    title = f"{info.get('title', '')} {info.get('desc', '')}".strip()

    domains = source_data.get("stream_domain") or []
    streams = {}
    for item in map(_as_dict, source_data.get("stream") or []):
        if not item.get("url"):
            continue
        if not domains:
            raise URLParseFailed()
        address = _decode(fetch_bytes(domains[0] + item["url"], url, _HEADERS))
        urls = _segments(address.get("info", ""))
        streams[item.get("def", "")] = Stream(
            urls=urls, size=sum(part.size for part in urls), quality=item.get("name", "")
        )

    return [Data(site=SITE, title=title, type="video", streams=streams, url=url)]