"""Video extractor for v.qq.com."""

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

SITE = "腾讯视频 v.qq.com"
PLAYER_VERSION = "3.2.19.333"
_INFO_API = (
    "http://vv.video.qq.com/getinfo?otype=json&platform=11&defnpayver=1"
    "&appver={}&defn=shd&vid={}"
)
_KEY_API = (
    "http://vv.video.qq.com/getkey?otype=json&platform=11&appver={}"
    "&filename={}&format={}&vid={}"
)
_JSONP = r"QZOutputJson=(.+);$"


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _fmt_prefix(fmt_id: int) -> str:
    if fmt_id > 100000:
        return "m"
    if fmt_id > 10000:
        return "p"
    return ""


def stream_filename(fn: str, fmt_id: int, part: int) -> str:
    """File name of one fragment of the format fmt_id, derived from fn."""
    pieces = fn.split(".")
    prefix = _fmt_prefix(fmt_id)
    if prefix:
        name = f"{prefix}{fmt_id % 10000}"
        if len(pieces) < 3:
            # v0739eolv38.mp4 -> v0739eolv38.m701.mp4
            pieces.insert(1, name)
        else:
            # n0687peq62x.p709.mp4 -> n0687peq62x.m709.mp4
            pieces[1] = name
    elif len(pieces) >= 3:
        # e0765r4mwcr.2.mp4 -> e0765r4mwcr.mp4
        del pieces[1]
    if prefix == "p":
        # n0687peq62x.p709.mp4 -> n0687peq62x.p709.1.mp4
        if len(pieces) < 4:
            pieces.insert(2, str(part))
        else:
            pieces[2] = str(part)
    return ".".join(pieces)


def _decode_jsonp(text: str) -> dict[str, Any]:
    found = match_one_of(text, _JSONP)
    if found is None:
        raise URLParseFailed()
    try:
        return _as_dict(json.loads(found[1]))
    except json.JSONDecodeError as exc:
        raise ExtractorError(f"invalid response: {exc}") from exc


def _first_video(info: dict[str, Any]) -> dict[str, Any]:
    videos = _as_dict(info.get("vl")).get("vi") or []
    if not videos:
        raise URLParseFailed()
    return _as_dict(videos[0])


def gen_streams(vid: str, cdn: str, info: dict[str, Any]) -> dict[str, Stream]:
    """Build one stream per format listed in the video info."""
    video = _first_video(info)
    clips = int(_as_dict(video.get("cl")).get("fc") or 0) or 1
    fn = video.get("fn", "")

    streams = {}
    for fmt in map(_as_dict, _as_dict(info.get("fl")).get("fi") or []):
        fmt_id = int(fmt.get("id", 0))
        urls = []
        for part in range(1, clips + 1):
            filename = stream_filename(fn, fmt_id, part)
            key_info = _decode_jsonp(
                fetch(_KEY_API.format(PLAYER_VERSION, filename, fmt_id, vid), cdn)
            )
            vkey = key_info.get("key") or video.get("fvkey", "")
            real_url = f"{cdn}{filename}?vkey={vkey}"
            urls.append(URL(url=real_url, size=content_size(real_url, cdn), ext="mp4"))
        streams[fmt.get("name", "")] = Stream(
            urls=urls, size=sum(item.size for item in urls), quality=fmt.get("cname", "")
        )
    return streams


def extract(url: str) -> list[Data]:
    """Extract every format of a qq video."""
    vids = match_one_of(url, r"vid=(\w+)", r"/(\w+)\.html")
    if vids is None:
        raise URLParseFailed()
    vid = vids[1]

    if len(vid) != 11:
        page = fetch(url, url)
        vids = match_one_of(
            page, r"vid=(\w+)", r"vid:\s*[\"'](\w+)", r"vid\s*=\s*[\"']\s*(\w+)"
        )
        if vids is None:
            raise URLParseFailed()
        vid = vids[1]

    info = _decode_jsonp(fetch(_INFO_API.format(PLAYER_VERSION, vid), url))
    message = info.get("msg")
    if message:
        raise ExtractorError(str(message))

    video = _first_video(info)
    hosts = _as_dict(video.get("ul")).get("ui") or []
    if not hosts:
        raise URLParseFailed()
    cdn = _as_dict(hosts[-1]).get("url", "")
    streams = gen_streams(vid, cdn, info)

    return [
        Data(site=SITE, title=video.get("ti", ""), type="video", streams=streams, url=url)
    ]