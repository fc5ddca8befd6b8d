"""Runtime settings shared by the downloader and the extractors."""

from __future__ import annotations

from dataclasses import dataclass, fields

VERSION = "0.9.8"

FAKE_HEADERS: dict[str, str] = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Charset": "UTF-8,*;q=0.5",
    "Accept-Encoding": "gzip,deflate,sdch",
    "Accept-Language": "en-US,en;q=0.8",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_13_6) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/69.0.3497.81 Safari/537.36"
    ),
}


@dataclass
class Config:
    """All options that influence extraction and downloading."""

    debug: bool = False
    version: bool = False
    info_only: bool = False
    cookie: str = ""
    playlist: bool = False
    refer: str = ""
    stream: str = ""
    output_path: str = ""
    output_name: str = ""
    extracted_data: bool = False
    chunk_size_mb: int = 0
    use_aria2_rpc: bool = False
    aria2_token: str = ""
    aria2_addr: str = "localhost:6800"
    aria2_method: str = "http"
    thread_number: int = 0
    file: str = ""
    item_start: int = 0
    item_end: int = 0
    items: str = ""
    episode_title_only: bool = False
    caption: bool = False
    youku_ccode: str = ""
    youku_ckey: str = ""
    youku_password: str = ""
    retry_times: int = 0
    multi_thread: bool = False

    def reset(self) -> None:
        """Restore every option to its default value."""
        for option in fields(self):
            setattr(self, option.name, option.default)


config = Config()