"""Video extractor for tiktok.com."""

from __future__ import annotations

import json
from typing import Any

from annie.extractors.common import URLParseFailed, content_size, fetch, match_one_of
from annie.types import URL, Data, Stream

SITE = "TikTok tiktok.com"
_VIDEO_OBJECT = r'<script type="application\/ld\+json" id="videoObject">(.*?)<\/script>'
_NEXT_DATA = (
    r'<script id="__NEXT_DATA__" type="application\/json" crossorigin="anonymous">'
    r"(.*?)<\/script>"
)


def _json_string(raw: str, path: str) -> str:
    """String value at a dotted path of a JSON document, or "" when absent."""
    try:
        node: Any = json.loads(raw)
    except json.JSONDecodeError:
        return ""
    for key in path.split("."):
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and key.isdigit() and int(key) < len(node):
            node = node[int(key)]
        else:
            return ""
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, bool):
        return "true" if node else "false"
    if isinstance(node, (int, float)):
        return str(node)
    return json.dumps(node, ensure_ascii=False, separators=(",", ":"))


def extract(uri: str) -> list[Data]:
    """Extract the video of a tiktok page."""
    html = fetch(uri, uri)

    video_tag = match_one_of(html, _VIDEO_OBJECT)
    if video_tag is None:
        raise URLParseFailed()
    video_url = _json_string(video_tag[1], "contentUrl")

    next_tag = match_one_of(html, _NEXT_DATA)
    if next_tag is None:
        raise URLParseFailed()
    title = _json_string(next_tag[1], "props.pageProps.videoData.itemInfos.text")

    size = content_size(video_url, uri)
    streams = {"default": Stream(urls=[URL(url=video_url, size=size, ext="mp4")], size=size)}
    return [Data(site=SITE, title=title, type="video", streams=streams, url=uri)]