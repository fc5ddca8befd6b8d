"""Fetching extracted data to local files."""

from __future__ import annotations

import os
import re
import shutil
import struct
import time
from concurrent.futures import ThreadPoolExecutor
from typing import BinaryIO

import requests
from tqdm import tqdm

from annie.config import FAKE_HEADERS, config
from annie.extractors.common import fetch_bytes
from annie.types import URL, Aria2Input, Aria2RPCData, Data, FilePartMeta

_TIMEOUT = 30
_MB = 1024 * 1024
_COPY_CHUNK = 32 * 1024
_YOUTUBE = "YouTube youtube.com"
_UNSAFE = re.compile(r'[\\/:*?"<>|\r\n\t]')


class _TransferError(Exception):
    """A failed transfer, remembering how many bytes made it to disk."""

    def __init__(self, written: int, error: Exception) -> None:
        super().__init__(str(error))
        self.written = written
        self.error = error


def _sanitize(name: str) -> str:
    return _UNSAFE.sub("-", name).strip()


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _progress_bar(total: int) -> tqdm:
    return tqdm(total=total, unit="B", unit_scale=True, unit_divisor=1024, mininterval=0.01)


def _existing_size(path: str) -> int | None:
    return os.path.getsize(path) if os.path.exists(path) else None


def _request_headers(extra: dict[str, str]) -> dict[str, str]:
    headers = dict(FAKE_HEADERS)
    # Byte offsets must match what lands on disk, so no transparent decoding.
    headers["Accept-Encoding"] = "identity"
    if config.cookie:
        headers["Cookie"] = config.cookie
    headers.update(extra)
    return headers


def file_path(name: str, ext: str, escape: bool = False) -> str:
    """Path of the output file for name and ext inside the output directory."""
    if escape:
        name = _sanitize(name)
    file_name = f"{name}.{ext}" if ext else name
    if config.output_path:
        os.makedirs(config.output_path, exist_ok=True)
        return os.path.join(config.output_path, file_name)
    return file_name


def caption(url: str, refer: str, file_name: str, ext: str) -> None:
    """Download danmaku, subtitles and the like when captions are enabled."""
    if not config.caption or config.info_only:
        return
    print("\nDownloading captions...")
    body = fetch_bytes(url, refer)
    with open(file_path(file_name, ext, True), "wb") as handle:
        handle.write(body)


def _write_file(url: str, handle: BinaryIO, headers: dict[str, str], bar: tqdm) -> int:
    written = 0
    try:
        with requests.get(
            url, headers=_request_headers(headers), stream=True, timeout=_TIMEOUT
        ) as response:
            for chunk in response.iter_content(_COPY_CHUNK):
                handle.write(chunk)
                written += len(chunk)
                bar.update(len(chunk))
    except requests.RequestException as exc:
        raise _TransferError(written, exc) from exc
    return written


def _transfer(
    url: str,
    handle: BinaryIO,
    headers: dict[str, str],
    bar: tqdm,
    offset: int,
    end: int | None,
    pause: bool,
) -> None:
    """Fetch into handle, resuming from where a failed attempt stopped."""
    attempts = max(1, config.retry_times)
    for attempt in range(attempts):
        try:
            _write_file(url, handle, headers, bar)
            return
        except _TransferError as exc:
            if attempt + 1 >= attempts:
                raise exc.error from None
            offset += exc.written
            headers["Range"] = f"bytes={offset}-{'' if end is None else end}"
            if pause:
                time.sleep(1)


def save(
    url_data: URL,
    refer: str,
    file_name: str,
    bar: tqdm | None = None,
    chunk_size_mb: int = 0,
) -> None:
    """Download one URL, resuming a previous .download file if present."""
    own_bar = bar is None
    if bar is None:
        bar = _progress_bar(url_data.size)
    try:
        _save(url_data, refer, file_name, bar, chunk_size_mb)
    finally:
        if own_bar:
            bar.close()


def _save(url_data: URL, refer: str, file_name: str, bar: tqdm, chunk_size_mb: int) -> None:
    path = file_path(file_name, url_data.ext, False)
    size = _existing_size(path)
    if size is not None and size == url_data.size:
        bar.update(size)
        return
    temp_path = path + ".download"
    temp_size = _existing_size(temp_path) or 0
    headers = {"Referer": refer}
    if temp_size > 0:
        headers["Range"] = f"bytes={temp_size}-"
        bar.update(temp_size)
        mode = "ab"
    else:
        mode = "wb"

    with open(temp_path, mode) as handle:
        if chunk_size_mb > 0:
            chunk_size = chunk_size_mb * _MB
            start = temp_size
            remaining = url_data.size - temp_size
            for _ in range(-(-remaining // chunk_size)):
                end = start + chunk_size - 1
                headers["Range"] = f"bytes={start}-{end}"
                _transfer(url_data.url, handle, headers, bar, start, end, pause=True)
                start = end + 1
        else:
            _transfer(url_data.url, handle, headers, bar, temp_size, None, pause=True)
    os.replace(temp_path, path)


def _part_path(path: str, part: FilePartMeta) -> str:
    return f"{path}.part{part.index:f}"


def read_part_meta(path: str, file_size: int) -> FilePartMeta:
    """Header of a part file, with cur set from how much data it holds."""
    with open(path, "rb") as handle:
        raw = handle.read(FilePartMeta.SIZE)
    meta = FilePartMeta.unpack(raw)
    meta.cur = meta.start + file_size - FilePartMeta.SIZE
    return meta


def scan_parts(file_path: str, file_name: str, ext: str) -> list[FilePartMeta]:
    """All part files belonging to file_path, ordered by index."""
    directory = os.path.dirname(file_path) or "."
    pattern = re.compile(re.escape(f"{file_name}.{ext}.part") + ".+")
    metas = [
        read_part_meta(entry.path, entry.stat().st_size)
        for entry in os.scandir(directory)
        if entry.is_file() and pattern.search(entry.name)
    ]
    metas.sort(key=lambda meta: meta.index)
    return metas


def merge_parts(file_path: str, parts: list[FilePartMeta]) -> None:
    """Join the data of the part files into file_path and delete the parts."""
    temp_path = file_path + ".download"
    with open(temp_path, "ab") as out:
        for part in parts:
            with open(_part_path(file_path, part), "rb") as source:
                source.seek(FilePartMeta.SIZE)
                shutil.copyfileobj(source, out)
    for part in parts:
        os.remove(_part_path(file_path, part))
    os.replace(temp_path, file_path)


def _plan_resumed(
    path: str, parts: list[FilePartMeta], total: int
) -> tuple[list[FilePartMeta], list[FilePartMeta], int]:
    ordered: list[FilePartMeta] = []
    unfinished: list[FilePartMeta] = []
    saved = 0
    last_end = -1
    for part in parts:
        if part.start - last_end != 1:
            gap = FilePartMeta(
                index=_f32(part.index - 0.000001),
                start=last_end + 1,
                end=part.start - 1,
                cur=last_end + 1,
            )
            ordered.append(gap)
            unfinished.append(gap)
        ordered.append(part)
        if part.cur <= part.end + 1:
            saved += part.cur - part.start
            if part.cur < part.end + 1:
                unfinished.append(part)
        else:
            # More data than the part can hold: throw it away and fetch again.
            os.remove(_part_path(path, part))
            part.cur = part.start
            unfinished.append(part)
        last_end = part.end
    if last_end != total - 1:
        tail = FilePartMeta(
            index=_f32(ordered[-1].index + 1), start=last_end + 1, end=total - 1, cur=last_end + 1
        )
        ordered.append(tail)
        unfinished.append(tail)
    return ordered, unfinished, saved


def _plan_fresh(total: int, thread_num: int) -> list[FilePartMeta]:
    parts = []
    part_size = total // thread_num
    start = 0
    index = 0
    while start < total:
        end = start + part_size - 1
        if end > total:
            end = total - 1
        elif index + 1 == thread_num and end < total:
            end = total - 1
        parts.append(FilePartMeta(index=float(index), start=start, end=end, cur=start))
        start = end + 1
        index += 1
    return parts


def _download_part(
    url: str, path: str, part: FilePartMeta, refer: str, chunk_size_mb: int, bar: tqdm
) -> None:
    target = _part_path(path, part)
    fresh = not _existing_size(target)
    chunk_size = part.end - part.start + 1 if chunk_size_mb <= 0 else chunk_size_mb * _MB
    headers = {"Referer": refer}
    with open(target, "ab") as handle:
        if fresh:
            handle.write(part.pack())
        while part.cur <= part.end:
            end = min(part.cur + chunk_size - 1, part.end)
            headers["Range"] = f"bytes={part.cur}-{end}"
            _transfer(url, handle, headers, bar, part.cur, end, pause=False)
            part.cur = end + 1


def multi_thread_save(
    url_data: URL,
    refer: str,
    file_name: str,
    bar: tqdm | None = None,
    chunk_size_mb: int = 0,
    thread_num: int = 1,
) -> None:
    """Download one URL as several ranges in parallel, resuming saved parts."""
    if thread_num < 1:
        raise ValueError("thread_num must be at least 1")
    own_bar = bar is None
    if bar is None:
        bar = _progress_bar(url_data.size)
    try:
        _multi_thread_save(url_data, refer, file_name, bar, chunk_size_mb, thread_num)
    finally:
        if own_bar:
            bar.close()


def _multi_thread_save(
    url_data: URL, refer: str, file_name: str, bar: tqdm, chunk_size_mb: int, thread_num: int
) -> None:
    path = file_path(file_name, url_data.ext, False)
    size = _existing_size(path)
    if size is not None and size == url_data.size:
        bar.update(size)
        return
    temp_path = path + ".download"
    temp_size = _existing_size(temp_path)
    if temp_size is not None:
        if temp_size == url_data.size:
            bar.update(url_data.size)
            os.replace(temp_path, path)
            return
        os.remove(temp_path)

    found = scan_parts(path, file_name, url_data.ext)
    if found:
        parts, unfinished, saved = _plan_resumed(path, found, url_data.size)
    else:
        parts = _plan_fresh(url_data.size, thread_num)
        unfinished, saved = list(parts), 0

    if saved > 0:
        bar.update(saved)
        if saved == url_data.size:
            merge_parts(path, parts)
            return

    with ThreadPoolExecutor(max_workers=thread_num) as pool:
        futures = [
            pool.submit(_download_part, url_data.url, path, part, refer, chunk_size_mb, bar)
            for part in unfinished
        ]
    errors = [future.exception() for future in futures if future.exception() is not None]
    if errors:
        raise errors[0]
    merge_parts(path, parts)


def _send_to_aria2(title: str, urls: list[URL], refer: str) -> None:
    rpc = Aria2RPCData()
    rpc.params[0] = "token:" + config.aria2_token
    inputs = Aria2Input(header=[f"Referer: {refer}"])
    endpoint = f"{config.aria2_method}://{config.aria2_addr}/jsonrpc"
    for index, part in enumerate(urls):
        rpc.params[1] = [part.url]
        inputs.out = f"{title}[{index}].{urls[0].ext}"
        rpc.params[2] = inputs
        response = requests.post(
            endpoint,
            data=rpc.to_json().encode("utf-8"),
            headers={"Content-Type": "application/json"},
            timeout=_TIMEOUT,
        )
        response.close()


def _concatenate(parts: list[str], target: str) -> None:
    with open(target, "wb") as out:
        for part in parts:
            with open(part, "rb") as source:
                shutil.copyfileobj(source, out)
    for part in parts:
        os.remove(part)


def download(data: Data, refer: str = "", chunk_size_mb: int = 0) -> None:
    """Download the chosen stream of data, or only describe it in info mode."""
    ordered = data.sorted_streams()
    if not ordered:
        raise ValueError("no streams to download")
    title = _sanitize(config.output_name or data.title)
    stream_name = config.stream or ordered[0].name
    stream = data.streams.get(stream_name)
    if stream is None:
        raise ValueError(f"no stream named {stream_name}")
    print(data.render_info(stream_name, config.info_only), end="")
    if config.info_only:
        return

    if config.use_aria2_rpc:
        _send_to_aria2(title, stream.urls, refer)
        return

    merged_ext = stream.urls[0].ext if data.site == _YOUTUBE else "mp4"
    merged_path = file_path(title, merged_ext, False)
    if os.path.exists(merged_path):
        print(f"{merged_path}: file already exists, skipping")
        return

    threads = max(1, config.thread_number)
    bar = _progress_bar(stream.size)
    try:
        if len(stream.urls) == 1:
            if config.multi_thread:
                multi_thread_save(stream.urls[0], refer, title, bar, chunk_size_mb, threads)
            else:
                save(stream.urls[0], refer, title, bar, chunk_size_mb)
            return

        parts = []
        with ThreadPoolExecutor(max_workers=threads) as pool:
            futures = []
            for index, part in enumerate(stream.urls):
                part_name = f"{title}[{index}]"
                parts.append(file_path(part_name, part.ext, False))
                futures.append(pool.submit(save, part, refer, part_name, bar, chunk_size_mb))
        errors = [future.exception() for future in futures if future.exception() is not None]
        if errors:
            raise errors[0]
    finally:
        bar.close()

    if data.type != "video":
        return
    if data.site == _YOUTUBE:
        raise RuntimeError(
            "separate audio and video tracks cannot be merged; parts kept at "
            + ", ".join(parts)
        )
    print(f"Merging video parts into {merged_path}")
    _concatenate(parts, merged_path)