"""Image extractor for bcy.net posts."""

from __future__ import annotations

import json
import re
from typing import Any

from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    content_size,
    fetch,
    match_one_of,
    name_and_ext,
    page_title,
)
from annie.types import URL, Data, Stream

SITE = "半次元 bcy.net"
_TITLE_SUFFIX = " - 半次元 banciyuan - ACG爱好者社区"
_ESCAPED = re.compile(r'\\(["\\])')


def _images(payload: Any) -> list[dict[str, Any]]:
    node = payload
    for key in ("detail", "post_data", "multi"):
        if not isinstance(node, dict):
            return []
        node = node.get(key)
    return [item for item in node or [] if isinstance(item, dict)]


def extract(url: str) -> list[Data]:
    """Extract every original image of a bcy post."""
    html = fetch(url, url)
    found = match_one_of(html, r'JSON.parse\("(.+?)"\);')
    if found is None:
        raise URLParseFailed()
    raw = _ESCAPED.sub(r"\1", found[1])
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ExtractorError(f"json unmarshal failed, err: {exc}") from exc

    title = page_title(html).replace(_TITLE_SUFFIX, "")

    urls = []
    for image in _images(payload):
        address = image.get("original_path", "")
        size = content_size(address, url)
        _, ext = name_and_ext(address)
        urls.append(URL(url=address, size=size, ext=ext))

    streams = {"default": Stream(urls=urls, size=sum(item.size for item in urls))}
    return [Data(site=SITE, title=title, type="image", streams=streams, url=url)]