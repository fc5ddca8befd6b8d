"""Video extractor for facebook.com."""

from __future__ import annotations

from annie.extractors.common import URLParseFailed, content_size, fetch, match_one_of
from annie.types import URL, Data, Stream

SITE = "Facebook facebook.com"
_QUALITIES = ("sd", "hd")


def extract(url: str) -> list[Data]:
    """Extract the sd and hd variants of a facebook video."""
    html = fetch(url, url)
    titles = match_one_of(html, r'<title id="pageTitle">(.+)</title>')
    if titles is None:
        raise URLParseFailed()
    title = titles[1]

    streams = {}
    for quality in _QUALITIES:
        found = match_one_of(html, f'{quality}_src_no_ratelimit:"(.+?)"')
        if found is None:
            continue
        address = found[1]
        size = content_size(address, url)
        streams[quality] = Stream(
            urls=[URL(url=address, size=size, ext="mp4")], size=size, quality=quality
        )

    return [Data(site=SITE, title=title, type="video", streams=streams, url=url)]