import json
import re

import pytest
import responses

from annie.config import config
from annie.extractors.common import ExtractorError, URLParseFailed
from annie.extractors.qq import SITE, extract, stream_filename

INFO_RE = re.compile(r"http://vv\.video\.qq\.com/getinfo.*")
KEY_RE = re.compile(r"http://vv\.video\.qq\.com/getkey.*")
CDN_RE = re.compile(r"http://cdn\.example\.com/.*")


@pytest.fixture(autouse=True)
def _clean_config():
    config.reset()
    yield
    config.reset()


@pytest.fixture
def rsps():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as mock:
        yield mock


def _jsonp(payload):
    return "QZOutputJson=" + json.dumps(payload, ensure_ascii=False) + ";"


def _info(title, fn, formats, clips=0, fvkey="fallback"):
    return {
        "fl": {"fi": formats},
        "vl": {
            "vi": [
                {
                    "fn": fn,
                    "ti": title,
                    "fvkey": fvkey,
                    "cl": {"fc": clips, "ci": []},
                    "ul": {"ui": [{"url": "http://a.example.com/"}, {"url": "http://cdn.example.com/"}]},
                }
            ]
        },
        "msg": "",
    }


def _register_cdn(rsps, size=10):
    rsps.add(responses.GET, CDN_RE, body=b"x" * size, headers={"Content-Length": str(size)})


@pytest.mark.parametrize(
    "fn, fmt_id, part, expected",
    [
        ("v0739eolv38.mp4", 100701, 1, "v0739eolv38.m701.mp4"),
        ("n0687peq62x.p709.mp4", 100709, 1, "n0687peq62x.m709.mp4"),
        ("n0687peq62x.p709.mp4", 10709, 1, "n0687peq62x.p709.1.mp4"),
        ("n0687peq62x.p709.mp4", 10709, 3, "n0687peq62x.p709.3.mp4"),
        ("e0765r4mwcr.2.mp4", 2, 1, "e0765r4mwcr.mp4"),
        ("e0765r4mwcr.mp4", 2, 1, "e0765r4mwcr.mp4"),
    ],
)
def test_stream_filename(fn, fmt_id, part, expected):
    assert stream_filename(fn, fmt_id, part) == expected


def test_normal_video(rsps):
    title = "世界杯第一期：100秒速成！“伪球迷”世界杯生存指南"
    info = _info(
        title,
        "n0687peq62x.p709.mp4",
        [
            {"id": 10709, "name": "fhd", "cname": "蓝光;(1080P)", "fs": 20},
            {"id": 2, "name": "sd", "cname": "标清;(270P)", "fs": 20},
        ],
        clips=2,
    )
    rsps.add(responses.GET, INFO_RE, body=_jsonp(info))
    rsps.add(responses.GET, KEY_RE, body=_jsonp({"key": "vkey0"}))
    _register_cdn(rsps)

    data = extract("https://v.qq.com/x/page/n0687peq62x.html")[0]

    assert data.site == SITE
    assert data.title == title
    assert data.type == "video"
    fhd = data.streams["fhd"]
    assert fhd.quality == "蓝光;(1080P)"
    assert [item.url for item in fhd.urls] == [
        "http://cdn.example.com/n0687peq62x.p709.1.mp4?vkey=vkey0",
        "http://cdn.example.com/n0687peq62x.p709.2.mp4?vkey=vkey0",
    ]
    assert fhd.size == 20
    sd = data.streams["sd"]
    assert [item.url for item in sd.urls] == [
        "http://cdn.example.com/n0687peq62x.mp4?vkey=vkey0",
        "http://cdn.example.com/n0687peq62x.mp4?vkey=vkey0",
    ]
    assert "vid=n0687peq62x" in rsps.calls[0].request.url


def test_fmt_id_video_uses_fallback_key(rsps):
    title = "《卡路里》出圈！妖娆男子教学广场舞版，大妈表情亮了！"
    info = _info(
        title,
        "e0765r4mwcr.2.mp4",
        [{"id": 10703, "name": "shd", "cname": "超清;(720P)", "fs": 7}],
        fvkey="fallback",
    )
    rsps.add(responses.GET, INFO_RE, body=_jsonp(info))
    rsps.add(responses.GET, KEY_RE, body=_jsonp({"key": ""}))
    _register_cdn(rsps, 7)

    data = extract("https://v.qq.com/x/cover/2aya3ibdmft6vdw/e0765r4mwcr.html")[0]

    assert data.title == title
    stream = data.streams["shd"]
    assert stream.quality == "超清;(720P)"
    assert [item.url for item in stream.urls] == [
        "http://cdn.example.com/e0765r4mwcr.p703.1.mp4?vkey=fallback"
    ]
    assert stream.size == 7
    assert stream.urls[0].ext == "mp4"


def test_vid_looked_up_in_page(rsps):
    page_url = "https://v.qq.com/x/cover/e5qmd3z5jr0uigk.html"
    rsps.add(responses.GET, page_url, body='var x = {vid: "abcdefghijk"};')
    info = _info("movie", "abcdefghijk.mp4", [])
    rsps.add(responses.GET, INFO_RE, body=_jsonp(info))

    data = extract(page_url)[0]

    assert data.title == "movie"
    assert data.streams == {}
    assert "vid=abcdefghijk" in rsps.calls[1].request.url


def test_api_message_raises(rsps):
    rsps.add(responses.GET, INFO_RE, body=_jsonp({"msg": "vid is wrong"}))
    with pytest.raises(ExtractorError, match="vid is wrong"):
        extract("https://v.qq.com/x/page/n0687peq62x.html")


def test_missing_jsonp_raises(rsps):
    rsps.add(responses.GET, INFO_RE, body="nothing here")
    with pytest.raises(URLParseFailed):
        extract("https://v.qq.com/x/page/n0687peq62x.html")


def test_unrecognised_url_raises():
    with pytest.raises(URLParseFailed):
        extract("https://example.com/")