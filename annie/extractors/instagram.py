"""Video and image extractor for instagram.com posts."""

from __future__ import annotations

import json
from typing import Any

from annie.extractors.common import (
    URLParseFailed,
    content_size,
    fetch,
    match_one_of,
    page_title,
)
from annie.types import URL, Data, Stream

SITE = "Instagram instagram.com"


def _media(raw: str) -> dict[str, Any]:
    try:
        payload = json.loads(raw)
        media = payload["entry_data"]["PostPage"][0]["graphql"]["shortcode_media"]
    except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
        raise URLParseFailed() from exc
    if not isinstance(media, dict):
        raise URLParseFailed()
    return media


def _single(address: str, ext: str, refer: str) -> Stream:
    size = content_size(address, refer)
    return Stream(urls=[URL(url=address, size=size, ext=ext)], size=size)


def extract(url: str) -> list[Data]:
    """Extract the video, the image or the album of an instagram post."""
    html = fetch(url, url)
    title = page_title(html)

    found = match_one_of(html, r"window\._sharedData\s*=\s*(.*);")
    if found is None:
        raise URLParseFailed()
    media = _media(found[1])

    if media.get("video_url"):
        data_type = "video"
        stream = _single(media["video_url"], "mp4", url)
    else:
        data_type = "image"
        sidecar = media.get("edge_sidecar_to_children") or {}
        edges = sidecar.get("edges") if isinstance(sidecar, dict) else None
        if edges is None:
            stream = _single(media.get("display_url", ""), "jpg", url)
        else:
            urls = []
            for edge in edges:
                address = edge.get("node", {}).get("display_url", "")
                urls.append(URL(url=address, size=content_size(address, url), ext="jpg"))
            stream = Stream(urls=urls, size=sum(item.size for item in urls))

    return [Data(site=SITE, title=title, type=data_type, streams={"default": stream}, url=url)]