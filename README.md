# annie

A library for pulling media information out of video and image sharing
sites and downloading it.

Each supported site has an extractor that turns a page address into a list
of `annie.types.Data` records. A record carries the site name, the title,
the media type (`"video"` or `"image"`) and one or more named streams
(`annie.types.Stream`); each stream lists the `annie.types.URL` entries
that make it up, with their sizes and file extensions. The downloader takes
such a record, picks a stream and saves it to disk.

## Supported sites

| Module                       | Site              |
|------------------------------|-------------------|
| `annie.extractors.bcy`       | bcy.net           |
| `annie.extractors.douyin`    | douyin.com        |
| `annie.extractors.douyu`     | v.douyu.com       |
| `annie.extractors.facebook`  | facebook.com      |
| `annie.extractors.geekbang`  | time.geekbang.org |
| `annie.extractors.instagram` | instagram.com     |
| `annie.extractors.iqiyi`     | iqiyi.com         |
| `annie.extractors.mgtv`      | mgtv.com          |
| `annie.extractors.miaopai`   | miaopai.com       |
| `annie.extractors.netease`   | music.163.com     |
| `annie.extractors.pornhub`   | pornhub.com       |
| `annie.extractors.qq`        | v.qq.com          |
| `annie.extractors.tangdou`   | tangdou.com       |
| `annie.extractors.tiktok`    | tiktok.com        |

Every extractor module exposes `extract(url)`, which returns a list of
`Data`. Most return a single record; `tangdou.extract` returns one record
per selected playlist entry when `config.playlist` is set, choosing entries
with `config.items` (such as `"1,5,6,8-10"`) or `config.item_start` /
`config.item_end`. In that mode an entry that fails is returned as a record
whose `err` field holds the exception.

## Extracting information

```python
from annie.extractors import douyin

for data in douyin.extract("https://www.douyin.com/share/video/..."):
    print(data.site, data.title, data.type)
    for name, stream in data.streams.items():
        print(name, stream.quality, stream.size)
```

When a page cannot be understood the extractors raise
`annie.extractors.common.URLParseFailed`; geekbang courses that have not
been bought raise `annie.extractors.common.LoginRequired`. Both derive from
`annie.extractors.common.ExtractorError`, which is also raised for other
site errors. Network failures surface as `requests` exceptions.

`annie.extractors.common` also holds the shared helpers: `fetch`,
`fetch_bytes`, `content_size`, `match_one_of`, `match_all`, `m3u8_urls`,
`name_and_ext` and `page_title`.

## Downloading

```python
from annie.downloader import download
from annie.extractors import bcy

url = "https://bcy.net/item/detail/..."
for data in bcy.extract(url):
    download(data, url, 10)
```

`download(data, refer, chunk_size_mb)` picks the largest stream unless
`config.stream` names another, prints the record's details, and saves the
stream. With `config.info_only` set it prints every stream and stops there.
A stream name that does not exist raises `ValueError`.

- Files are written with a `.download` suffix and renamed when complete; an
  existing `.download` file is resumed with an HTTP `Range` request. A
  finished file of the expected size is skipped.
- With a chunk size above zero, a file is fetched in ranges of that many
  megabytes. Failed transfers are retried `config.retry_times` times,
  continuing from the last byte written.
- With `config.multi_thread`, a single-URL stream is split into
  `config.thread_number` ranges downloaded in parallel. Each part file
  starts with a small binary header (`annie.types.FilePartMeta`) so an
  interrupted download can be scanned and continued; the parts are merged
  once all are complete.
- Streams made of several fragments are fetched concurrently, one file per
  fragment (`title[0].ts`, `title[1].ts`, …). For video they are then joined
  into `title.mp4`.
- With `config.use_aria2_rpc`, each URL is instead sent to an aria2 server
  as an `aria2.addUri` JSON-RPC call at
  `{config.aria2_method}://{config.aria2_addr}/jsonrpc`, using
  `config.aria2_token`.

Lower-level pieces are available too: `save`, `multi_thread_save`,
`caption`, `scan_parts`, `read_part_meta`, `merge_parts` and `file_path` in
`annie.downloader`. `caption` only downloads when `config.caption` is set
and `config.info_only` is not.

## Configuration

Settings live on the shared `annie.config.config` object, an instance of
`annie.config.Config`: output name and path, chosen stream, cookie (sent
with every request), thread count, retry count, info-only mode, caption
download, multi-threaded mode, aria2 address, method and token, playlist
item selection and more. `config.reset()` restores every setting to its
default.

```python
from annie.config import config

config.output_path = "downloads"
config.retry_times = 5
config.thread_number = 4
```

## What this package does not do

- There is no command-line program; everything is used from Python.
- Joining video fragments is plain byte concatenation into an `.mp4` file,
  not remuxing. Records from `"YouTube youtube.com"` with separate audio and
  video parts cannot be merged: `download` raises `RuntimeError` and leaves
  the parts on disk.
- Douyu live rooms are not supported.

## Testing

The test suite uses pytest and `responses`, so no real network traffic is
made; install the `test` extra to get both.