"""Data describing what an extractor found and how to fetch it."""

from __future__ import annotations

import json
import struct
from dataclasses import dataclass, field
from typing import Any, ClassVar

from termcolor import colored


@dataclass
class URL:
    """One downloadable resource."""

    url: str
    size: int = 0
    ext: str = ""


@dataclass
class Stream:
    """One quality variant, possibly made of several fragments."""

    urls: list[URL] = field(default_factory=list)
    quality: str = ""
    size: int = 0
    name: str = ""

    def calculate_total_size(self) -> None:
        """Set the size to the sum of the fragment sizes."""
        self.size = sum(part.size for part in self.urls)

    def render(self) -> str:
        """Human-readable description of this stream."""
        size = self.size or sum(part.size for part in self.urls)
        out = [colored(f"     [{self.name}]  -------------------", "blue") + "\n"]
        if self.quality:
            out.append(colored("     Quality:         ", "cyan") + self.quality + "\n")
        out.append(
            colored("     Size:            ", "cyan")
            + f"{size / (1024 * 1024):.2f} MiB ({size} Bytes)\n"
        )
        out.append(
            colored("     # download with: ", "cyan") + f"annie -f {self.name} ...\n\n"
        )
        return "".join(out)


@dataclass
class Data:
    """Everything extracted from one page."""

    site: str = ""
    title: str = ""
    type: str = ""
    streams: dict[str, Stream] = field(default_factory=dict)
    err: Exception | None = None
    url: str = ""

    def sorted_streams(self) -> list[Stream]:
        """Name and size every stream, largest first."""
        ordered = []
        for name, stream in self.streams.items():
            if stream.size == 0:
                stream.calculate_total_size()
            stream.name = name
            ordered.append(stream)
        if len(ordered) > 1:
            ordered.sort(key=lambda item: item.size, reverse=True)
        return ordered

    def render_info(self, stream: str, info_only: bool) -> str:
        """Describe the data; all streams when info_only, else the chosen one."""
        ordered = self.sorted_streams()
        out = [
            "\n",
            colored(" Site:      ", "cyan") + f"{self.site}\n",
            colored(" Title:     ", "cyan") + f"{self.title}\n",
            colored(" Type:      ", "cyan") + f"{self.type}\n",
        ]
        if info_only:
            out.append(colored(" Streams:   ", "cyan") + "# All available quality\n")
            out.extend(item.render() for item in ordered)
        else:
            out.append(colored(" Stream:   ", "cyan") + "\n")
            out.append(self.streams[stream].render())
        return "".join(out)


def empty_data(url: str, err: Exception | None) -> Data:
    """Data carrying only the address and the error that occurred."""
    return Data(url=url, err=err)


@dataclass
class FilePartMeta:
    """Header stored at the start of each partial download file."""

    index: float
    start: int
    end: int
    cur: int

    FORMAT: ClassVar[str] = "<fqqq"
    SIZE: ClassVar[int] = struct.calcsize("<fqqq")

    def pack(self) -> bytes:
        """Little-endian binary form of the header."""
        return struct.pack(self.FORMAT, self.index, self.start, self.end, self.cur)

    @classmethod
    def unpack(cls, raw: bytes) -> FilePartMeta:
        """Read a header from the beginning of raw."""
        if len(raw) < cls.SIZE:
            raise ValueError(
                "The file has been broken, please delete all part files and re-download."
            )
        return cls(*struct.unpack_from(cls.FORMAT, raw))


@dataclass
class Aria2Input:
    """Options for aria2.addUri."""

    out: str = ""
    header: list[str] = field(default_factory=list)


@dataclass
class Aria2RPCData:
    """A JSON-RPC 2.0 request for aria2."""

    jsonrpc: str = "2.0"
    id: str = "annie"
    method: str = "aria2.addUri"
    params: list[Any] = field(default_factory=lambda: [None, None, None])

    def to_json(self) -> str:
        """Compact JSON encoding of the request."""
        params = [
            {"out": item.out, "header": item.header} if isinstance(item, Aria2Input) else item
            for item in self.params
        ]
        payload = {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": params,
        }
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)