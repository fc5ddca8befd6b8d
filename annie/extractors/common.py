"""Errors and HTTP/text helpers shared by the site extractors."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup

from annie.config import FAKE_HEADERS, config

_TIMEOUT = 30


class ExtractorError(Exception):
    """Raised when a page cannot be turned into downloadable data."""


class URLParseFailed(ExtractorError):
    """The expected data could not be found in the page."""

    def __init__(self, message: str = "url parse failed") -> None:
        super().__init__(message)


class LoginRequired(ExtractorError):
    """The content is only available to a logged-in user."""

    def __init__(self, message: str = "login required") -> None:
        super().__init__(message)


def _headers(refer: str, extra: dict[str, str] | None) -> dict[str, str]:
    headers = dict(FAKE_HEADERS)
    if config.cookie:
        headers["Cookie"] = config.cookie
    if refer:
        headers["Referer"] = refer
    if extra:
        headers.update(extra)
    return headers


def _get(
    url: str, refer: str, headers: dict[str, str] | None, stream: bool = False
) -> requests.Response:
    attempts = max(1, config.retry_times)
    for attempt in range(attempts):
        try:
            return requests.get(
                url, headers=_headers(refer, headers), timeout=_TIMEOUT, stream=stream
            )
        except requests.RequestException:
            if attempt + 1 >= attempts:
                raise
    raise AssertionError("unreachable")


def fetch_bytes(url: str, refer: str = "", headers: dict[str, str] | None = None) -> bytes:
    """Body of a GET request."""
    return _get(url, refer, headers).content


def fetch(url: str, refer: str = "", headers: dict[str, str] | None = None) -> str:
    """Body of a GET request decoded as UTF-8."""
    return fetch_bytes(url, refer, headers).decode("utf-8", errors="replace")


def content_size(url: str, refer: str = "") -> int:
    """Size in bytes announced by the server for url."""
    with _get(url, refer, None, stream=True) as response:
        length = response.headers.get("Content-Length")
    if length is None:
        raise ExtractorError(f"no Content-Length for {url}")
    try:
        return int(length)
    except ValueError as exc:
        raise ExtractorError(f"invalid Content-Length {length!r} for {url}") from exc


def match_one_of(text: str, *patterns: str) -> list[str] | None:
    """Groups of the first pattern that matches, whole match first."""
    for pattern in patterns:
        found = re.search(pattern, text)
        if found:
            return [found.group(0), *(group or "" for group in found.groups())]
    return None


def match_all(text: str, pattern: str) -> list[list[str]]:
    """Every match of pattern, each as whole match followed by its groups."""
    return [
        [found.group(0), *(group or "" for group in found.groups())]
        for found in re.finditer(pattern, text)
    ]


def m3u8_urls(url: str) -> list[str]:
    """Absolute segment addresses listed in an m3u8 playlist."""
    playlist = fetch(url, url)
    return [
        urljoin(url, line.strip())
        for line in playlist.splitlines()
        if line.strip() and not line.startswith("#")
    ]


def name_and_ext(url: str) -> tuple[str, str]:
    """File name and extension of url, asking the server when the path has none."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ExtractorError(f"invalid url: {url}")
    pieces = parsed.path.rsplit("/", 1)[-1].split(".")
    if len(pieces) > 1:
        return pieces[0], pieces[1]
    with _get(url, url, None, stream=True) as response:
        content_type = response.headers.get("Content-Type", "")
    media = content_type.split(";", 1)[0].strip()
    if "/" not in media:
        raise ExtractorError(f"cannot determine extension of {url}")
    return pieces[0], media.split("/", 1)[1]


def page_title(html: str) -> str:
    """Title of an HTML page: the title tag, else og:title, else the first h1."""
    soup = BeautifulSoup(html, "html.parser")
    if soup.title and soup.title.get_text(strip=True):
        return soup.title.get_text().strip()
    meta = soup.find("meta", attrs={"property": "og:title"})
    if meta and meta.get("content"):
        return meta["content"].strip()
    heading = soup.find("h1")
    if heading:
        return heading.get_text().strip().replace("\n", "")
    return ""