"""Course video extractor for time.geekbang.org."""

from __future__ import annotations

import json
from typing import Any

import requests

from annie.config import FAKE_HEADERS, config
from annie.extractors.common import (
    ExtractorError,
    LoginRequired,
    URLParseFailed,
    fetch,
    m3u8_urls,
    match_one_of,
)
from annie.types import URL, Data, Stream

SITE = "极客时间 geekbang.org"
_ARTICLE_API = "https://time.geekbang.org/serv/v1/article"
_AUTH_API = "https://time.geekbang.org/serv/v3/source_auth/video_play_auth"
_PLAY_INFO_API = "http://ali.mantv.top/play/info?playAuth="
_TIMEOUT = 30


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _raw(value: Any) -> str:
    if value is None:
        return ""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _decode(text: str, source: str) -> dict[str, Any]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractorError(f"invalid response from {source}: {exc}") from exc
    return _as_dict(payload)


def _post_json(url: str, body: str, headers: dict[str, str]) -> dict[str, Any]:
    merged = dict(FAKE_HEADERS)
    if config.cookie:
        merged["Cookie"] = config.cookie
    merged.update(headers)
    response = requests.post(url, data=body.encode("utf-8"), headers=merged, timeout=_TIMEOUT)
    return _decode(response.text, url)


def _check(payload: dict[str, Any]) -> None:
    code = payload.get("code", 0)
    if isinstance(code, int) and code < 0:
        raise ExtractorError(_raw(payload.get("error")))


def extract(url: str) -> list[Data]:
    """Extract every definition of a geekbang course video."""
    matches = match_one_of(url, r"https?://time.geekbang.org/course/detail/(\d+)-(\d+)")
    if matches is None:
        raise URLParseFailed()
    article_id = matches[2]

    headers = {
        "Origin": "https://time.geekbang.org",
        "Content-Type": "application/json",
        "Referer": url,
    }
    article = _post_json(_ARTICLE_API, '{"id":' + article_id + "}", headers)
    _check(article)
    info = _as_dict(article.get("data"))
    video_id = info.get("video_id") or ""
    if not video_id and not info.get("column_had_sub"):
        raise LoginRequired("请先购买课程，或使用Cookie登录。")

    auth = _post_json(
        _AUTH_API,
        '{"source_type":1,"aid":' + article_id + ',"video_id":"' + video_id + '"}',
        headers,
    )
    _check(auth)
    play_auth = _as_dict(auth.get("data")).get("play_auth") or ""

    play_url = _PLAY_INFO_API + play_auth
    play_info = _decode(fetch(play_url, "", {"Accept-Encoding": ""}), play_url)
    media_list = _as_dict(play_info.get("PlayInfoList")).get("PlayInfo") or []

    streams = {}
    for media in map(_as_dict, media_list):
        urls = [URL(url=address, size=0, ext="ts") for address in m3u8_urls(media.get("PlayURL", ""))]
        definition = media.get("Definition", "")
        streams[definition] = Stream(urls=urls, size=media.get("Size", 0), quality=definition)

    title = info.get("article_sharetitle", "")
    return [Data(site=SITE, title=title, type="video", streams=streams, url=url)]