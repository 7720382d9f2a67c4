import threading

import pytest

from zhaddons.cloudpinyin import (
    MAX_BUFFER_SIZE,
    MAX_ERROR,
    BaiduBackend,
    CloudPinyin,
    CloudPinyinBackend,
    FetchRequest,
    Fetcher,
    GoogleBackend,
)

GOOGLE_BODY = '["SUCCESS",[["nihao",["你好"],[],{}]]]'.encode("utf-8")
BAIDU_BODY = '{"0":[[["你好",5,{}]]],"status":"T"}'.encode("utf-8")


class FakeOpener:
    def __init__(self, status=200, body=GOOGLE_BODY, error=None):
        self.status = status
        self.body = body
        self.error = error
        self.calls = []
        self.lock = threading.Lock()

    def __call__(self, url, proxy, timeout):
        with self.lock:
            self.calls.append((url, proxy))
        if self.error is not None:
            raise self.error
        return self.status, [self.body]


def run(cloud, fetcher, pinyin):
    results = []
    cloud.request(pinyin, lambda py, hz: results.append((py, hz)))
    if not results:
        assert fetcher.wait(5)
        cloud.process_finished()
    return results


@pytest.fixture
def fetcher_factory():
    made = []

    def make(opener, max_handles=100):
        fetcher = Fetcher(opener, max_handles)
        made.append(fetcher)
        return fetcher

    yield make
    for fetcher in made:
        fetcher.close()


def test_google_parse_result():
    backend = GoogleBackend("https://www.google.cn/inputtools/request?ime=pinyin&text=")
    assert backend.parse_result(GOOGLE_BODY) == "你好"
    assert backend.parse_result(b"garbage") == ""


def test_google_request_url_escapes():
    url = "https://www.google.cn/inputtools/request?ime=pinyin&text="
    backend = GoogleBackend(url)
    assert backend.request_url("nihao") == url + "nihao"
    assert backend.request_url("ni'hao") == url + "ni%27hao"


def test_baidu_backend():
    backend = BaiduBackend()
    assert backend.request_url("nihao") == "https://olime.baidu.com/py?rn=0&pn=1&ol=1&py=nihao"
    assert backend.parse_result(BAIDU_BODY) == "你好"
    assert backend.parse_result(b'[["",') == ""


def test_fetch_request_buffer_limit():
    request = FetchRequest("u", "", "py", lambda a, b: None)
    assert request.append(b"x" * MAX_BUFFER_SIZE)
    assert not request.append(b"y")
    assert len(request.data) == MAX_BUFFER_SIZE


def test_short_pinyin_answers_empty_without_request(fetcher_factory):
    opener = FakeOpener()
    fetcher = fetcher_factory(opener)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.GOOGLE_CN, 4, "")
    assert run(cloud, fetcher, "ni") == [("ni", "")]
    assert opener.calls == []


def test_request_and_cache(fetcher_factory):
    opener = FakeOpener()
    fetcher = fetcher_factory(opener)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.GOOGLE_CN, 4, "")
    assert run(cloud, fetcher, "nihao") == [("nihao", "你好")]
    assert run(cloud, fetcher, "nihao") == [("nihao", "你好")]
    assert len(opener.calls) == 1
    assert opener.calls[0][0].endswith("text=nihao")


def test_baidu_through_cloud(fetcher_factory):
    opener = FakeOpener(body=BAIDU_BODY)
    fetcher = fetcher_factory(opener)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.BAIDU, 4, "")
    assert run(cloud, fetcher, "nihao") == [("nihao", "你好")]
    assert opener.calls[0][0].startswith("https://olime.baidu.com/")


def test_proxy_passed_to_opener(fetcher_factory):
    opener = FakeOpener()
    fetcher = fetcher_factory(opener)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.GOOGLE, 4, "http://localhost:1080")
    run(cloud, fetcher, "nihao")
    assert opener.calls[0][1] == "http://localhost:1080"


def test_errors_stop_requests_until_reset(fetcher_factory):
    opener = FakeOpener(status=500, body=b"")
    fetcher = fetcher_factory(opener)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.GOOGLE_CN, 4, "")
    for index in range(MAX_ERROR):
        assert run(cloud, fetcher, f"pinyin{index}") == [(f"pinyin{index}", "")]
    assert cloud.error_count() == MAX_ERROR
    calls = len(opener.calls)
    assert run(cloud, fetcher, "another") == [("another", "")]
    assert len(opener.calls) == calls
    cloud.reset_error()
    assert cloud.error_count() == 0
    opener.status, opener.body = 200, GOOGLE_BODY
    assert run(cloud, fetcher, "nihao") == [("nihao", "你好")]


def test_opener_failure_gives_empty_answer(fetcher_factory):
    opener = FakeOpener(error=OSError("down"))
    fetcher = fetcher_factory(opener)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.GOOGLE_CN, 4, "")
    assert run(cloud, fetcher, "nihao") == [("nihao", "")]
    assert cloud.error_count() == 1


def test_fetcher_handle_limit(fetcher_factory):
    release = threading.Event()

    def opener(url, proxy, timeout):
        release.wait(5)
        return 200, [b"ok"]

    fetcher = fetcher_factory(opener, max_handles=1)
    assert fetcher.add_request("u1", "", "a", lambda a, b: None)
    assert not fetcher.add_request("u2", "", "b", lambda a, b: None)
    assert fetcher.pop_finished() is None
    release.set()
    assert fetcher.wait(5)
    item = fetcher.pop_finished()
    assert (item.pinyin, bytes(item.data), item.http_code) == ("a", b"ok", 200)
    assert fetcher.add_request("u3", "", "c", lambda a, b: None)


def test_busy_fetcher_answers_empty(fetcher_factory):
    release = threading.Event()

    def opener(url, proxy, timeout):
        release.wait(5)
        return 200, [GOOGLE_BODY]

    fetcher = fetcher_factory(opener, max_handles=1)
    cloud = CloudPinyin(fetcher, CloudPinyinBackend.GOOGLE_CN, 4, "")
    first, second = [], []
    cloud.request("nihao", lambda py, hz: first.append(hz))
    cloud.request("zaijian", lambda py, hz: second.append(hz))
    assert second == [""]
    release.set()
    assert fetcher.wait(5)
    assert cloud.process_finished() == 1
    assert first == ["你好"]


def test_closed_fetcher_refuses_requests():
    fetcher = Fetcher(FakeOpener(), 2)
    fetcher.close()
    assert fetcher.add_request("u", "", "a", lambda a, b: None) is False