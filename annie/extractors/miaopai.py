"""Video extractor for miaopai.com."""

from __future__ import annotations

import json
import random

from annie.extractors.common import (
    ExtractorError,
    URLParseFailed,
    content_size,
    fetch,
    match_one_of,
)
from annie.types import URL, Data, Stream

SITE = "秒拍 miaopai.com"
_API = "https://n.miaopai.com/api/aj_media/info.json?smid={}&appid=530&_cb=_jsonp{}"
_CHARS = "abcdefghijklnmopqrstuvwxyz0123456789"


def random_string(length: int) -> str:
    """Random lower-case alphanumeric string; the last digit is never used."""
    return "".join(random.choice(_CHARS[:-1]) for _ in range(length))


def extract(url: str) -> list[Data]:
    """Extract a miaopai video."""
    ids = match_one_of(url, r"/media/([^\./]+)", r"/show(?:/channel)?/([^\./]+)")
    if ids is None:
        raise URLParseFailed()

    token = random_string(10)
    text = fetch(_API.format(ids[1], token), url)
    found = match_one_of(text, token + r"\((.*)\);$")
    if found is None:
        raise ExtractorError("获取视频信息失败。")
    try:
        payload = json.loads(found[1])
    except json.JSONDecodeError as exc:
        raise ExtractorError(f"invalid video info: {exc}") from exc

    try:
        info = payload["data"]
        real_url = info["meta_data"][0]["play_urls"]["m"]
    except (KeyError, IndexError, TypeError) as exc:
        raise URLParseFailed() from exc

    size = content_size(real_url, url)
    streams = {"default": Stream(urls=[URL(url=real_url, size=size, ext="mp4")], size=size)}
    return [
        Data(
            site=SITE,
            title=info.get("description", ""),
            type="video",
            streams=streams,
            url=url,
        )
    ]