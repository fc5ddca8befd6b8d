"""Video extractor for douyin.com."""

from __future__ import annotations

from annie.extractors.common import URLParseFailed, content_size, fetch, match_one_of
from annie.types import URL, Data, Stream

SITE = "抖音 douyin.com"
_DEFAULT_TITLE = "抖音短视频"


def extract(url: str) -> list[Data]:
    """Extract the video of a douyin share page."""
    html = fetch(url, url)
    desc = match_one_of(html, r'<p class="desc">(.+?)</p>')
    title = desc[1] if desc is not None else _DEFAULT_TITLE

    found = match_one_of(html, r'playAddr: "(.+?)"')
    if found is None:
        raise URLParseFailed()
    real_url = found[1]

    size = content_size(real_url, url)
    streams = {"default": Stream(urls=[URL(url=real_url, size=size, ext="mp4")], size=size)}
    return [Data(site=SITE, title=title, type="video", streams=streams, url=url)]