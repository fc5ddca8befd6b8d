"""Video extractor for pornhub.com."""

from __future__ import annotations

import json
from typing import Any

from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    content_size,
    fetch,
    match_one_of,
)
from annie.types import URL, Data, Stream

SITE = "Pornhub pornhub.com"
_DEFAULT_TITLE = "pornhub video"


def _raw(value: Any) -> str:
    """JSON text of a value, as it appeared in the page."""
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def extract(url: str) -> list[Data]:
    """Extract every progressive quality of a video."""
    html = fetch(url, url)
    desc = match_one_of(html, r'<span class="inlineFree">(.+?)</span>')
    title = desc[1] if desc is not None else _DEFAULT_TITLE

    found = match_one_of(html, r'"mediaDefinitions":(.+?),"isVertical"')
    if found is None:
        raise URLParseFailed()
    try:
        definitions = json.loads(found[1])
    except json.JSONDecodeError as exc:
        raise ExtractorError(f"invalid media definitions: {exc}") from exc
    if not isinstance(definitions, list):
        raise URLParseFailed()

    streams = {}
    for item in definitions:
        if not isinstance(item, dict) or item.get("format") == "hls":
            continue
        quality = _raw(item.get("quality"))
        if "[" in quality:
            continue
        real_url = item.get("videoUrl") or ""
        if not real_url:
            continue
        size = content_size(real_url, url)
        streams[quality] = Stream(
            urls=[URL(url=real_url, size=size, ext="mp4")], size=size, quality=f"{quality}P"
        )

    return [Data(site=SITE, title=title, type="video", streams=streams, url=url)]