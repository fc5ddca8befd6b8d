import pytest
import responses

from annie.config import config
from annie.extractors.common import URLParseFailed
from annie.extractors.tangdou import SITE, extract


@pytest.fixture(autouse=True)
def _clean_config():
    config.reset()
    yield
    config.reset()


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _register_video(rsps, url, size):
    rsps.add(responses.GET, url, body=b"x" * size, headers={"Content-Length": str(size)})


def test_direct_video_url_and_div_title(mocked):
    page = "http://www.tangdou.com/v95/dAOQNgMjwT2D5w2.html"
    title = "杨丽萍广场舞《好日子天天过》喜庆双扇扇子舞"
    mocked.add(
        responses.GET,
        page,
        body=f"<div class=\"title\">{title}</div><script>var p = {{video:'http://video.example.com/a.mp4'}};</script>",
    )
    _register_video(mocked, "http://video.example.com/a.mp4", 12)

    data = extract(page)[0]

    assert data.err is None
    assert data.site == SITE
    assert data.title == title
    assert data.type == "video"
    stream = data.streams["default"]
    assert [(item.url, item.size, item.ext) for item in stream.urls] == [
        ("http://video.example.com/a.mp4", 12, "mp4")
    ]
    assert stream.size == 12


def test_share_url_and_head_title(mocked):
    page = "http://m.tangdou.com/v94/dAOMMYNjwT1T2Q2.html"
    title = "吉美广场舞《再唱山歌给党听》民族形体舞 附教学视频在线观看"
    mocked.add(
        responses.GET,
        page,
        body=(
            f"<html><head><title>{title}</title></head><body>"
            '<div class="video">\n  <script src="http://share.example.com/s.js"></script></div>'
            "</body></html>"
        ),
    )
    mocked.add(
        responses.GET,
        "http://share.example.com/s.js",
        body='document.write("<video src=\\"http://video.example.com/b.mp4\\"></video>");',
    )
    _register_video(mocked, "http://video.example.com/b.mp4", 9)

    data = extract(page)[0]

    assert data.err is None
    assert data.title == title
    assert data.streams["default"].urls[0].url == "http://video.example.com/b.mp4"
    assert data.streams["default"].size == 9


def test_missing_title_is_recorded_as_error(mocked):
    page = "http://www.tangdou.com/v1/none.html"
    mocked.add(responses.GET, page, body="<p>nothing</p>")

    data = extract(page)[0]

    assert isinstance(data.err, URLParseFailed)
    assert data.url == page
    assert data.streams == {}


def test_missing_video_is_recorded_as_error(mocked):
    page = "http://www.tangdou.com/v1/novideo.html"
    mocked.add(responses.GET, page, body="<title>only a title</title>")

    data = extract(page)[0]

    assert isinstance(data.err, URLParseFailed)
    assert data.title == ""


def _register_playlist(rsps, count):
    playlist = "http://www.tangdou.com/playlist/view/2816/page/4"
    links = "".join(
        f'<a target="tdplayer" href="http://www.tangdou.com/v/{n}.html" class="title">v{n}</a>'
        for n in range(1, count + 1)
    )
    rsps.add(responses.GET, playlist, body=links)
    for n in range(1, count + 1):
        rsps.add(
            responses.GET,
            f"http://www.tangdou.com/v/{n}.html",
            body=f"<div class=\"title\">title {n}</div>video:\"http://video.example.com/{n}.mp4\"",
        )
        _register_video(rsps, f"http://video.example.com/{n}.mp4", n)
    return playlist


def test_playlist_all_items_in_order(mocked):
    playlist = _register_playlist(mocked, 3)
    config.playlist = True
    config.thread_number = 2

    items = extract(playlist)

    assert [item.title for item in items] == ["title 1", "title 2", "title 3"]
    assert [item.streams["default"].size for item in items] == [1, 2, 3]


def test_playlist_selected_items(mocked):
    playlist = _register_playlist(mocked, 4)
    config.playlist = True
    config.items = "1,3-4"

    items = extract(playlist)

    assert [item.title for item in items] == ["title 1", "title 3", "title 4"]


def test_playlist_start_and_end(mocked):
    playlist = _register_playlist(mocked, 4)
    config.playlist = True
    config.item_start = 2
    config.item_end = 3

    items = extract(playlist)

    assert [item.url for item in items] == [
        "http://www.tangdou.com/v/2.html",
        "http://www.tangdou.com/v/3.html",
    ]