"""Cloud pinyin lookup through online input-method services."""

from __future__ import annotations

import threading
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Dict, Iterable, Iterator, Optional, Tuple
from urllib.error import HTTPError
from urllib.parse import quote
from urllib.request import ProxyHandler, build_opener

from .lrucache import LRUCache

MAX_HANDLE = 100
MAX_BUFFER_SIZE = 2048
MAX_ERROR = 10
REQUEST_TIMEOUT = 10.0
ERROR_RESET_DELAY = 5 * 60.0
CACHE_SIZE = 2048

CloudPinyinCallback = Callable[[str, str], None]
Opener = Callable[[str, str, float], Tuple[int, Iterable[bytes]]]

GOOGLE_URL = "https://www.google.com/inputtools/request?ime=pinyin&text="
GOOGLE_CN_URL = "https://www.google.cn/inputtools/request?ime=pinyin&text="
BAIDU_URL = "https://olime.baidu.com/py?rn=0&pn=1&ol=1&py="


class CloudPinyinBackend(Enum):
    """Online services that can answer a pinyin query."""

    GOOGLE = "Google"
    GOOGLE_CN = "GoogleCN"
    BAIDU = "Baidu"


def _escape(text: str) -> str:
    return quote(text, safe="")


def _between(data: bytes, start_marker: bytes, end_marker: bytes) -> str:
    start = data.find(start_marker)
    if start < 0:
        return ""
    start += len(start_marker)
    end = data.find(end_marker, start)
    if end <= start:
        return ""
    return data[start:end].decode("utf-8", errors="replace")


class Backend:
    """Builds the request for a service and extracts the answer."""

    def request_url(self, pinyin: str) -> str:
        raise NotImplementedError

    def parse_result(self, data: bytes) -> str:
        raise NotImplementedError


class GoogleBackend(Backend):
    """Google input tools service."""

    def __init__(self, url: str) -> None:
        self.url = url

    def request_url(self, pinyin: str) -> str:
        return self.url + _escape(pinyin)

    def parse_result(self, data: bytes) -> str:
        return _between(bytes(data), b'",["', b'"')


class BaiduBackend(Backend):
    """Baidu online input service."""

    def request_url(self, pinyin: str) -> str:
        return BAIDU_URL + _escape(pinyin)

    def parse_result(self, data: bytes) -> str:
        return _between(bytes(data), b'[["', b'",')


@dataclass
class FetchRequest:
    """One in-flight or finished lookup."""

    url: str
    proxy: str
    pinyin: str
    callback: CloudPinyinCallback
    data: bytearray = field(default_factory=bytearray)
    http_code: int = 0
    error: Optional[BaseException] = None

    def append(self, chunk: bytes) -> bool:
        """Add received bytes; return False if the buffer limit would be exceeded."""
        if len(self.data) + len(chunk) > MAX_BUFFER_SIZE:
            return False
        self.data.extend(chunk)
        return True


def _read_chunks(response) -> Iterator[bytes]:
    with closing(response):
        while True:
            chunk = response.read(4096)
            if not chunk:
                return
            yield chunk


def _urllib_open(url: str, proxy: str, timeout: float) -> Tuple[int, Iterable[bytes]]:
    handlers = [ProxyHandler({"http": proxy, "https": proxy})] if proxy else []
    opener = build_opener(*handlers)
    try:
        response = opener.open(url, timeout=timeout)
    except HTTPError as exc:
        return exc.code, _read_chunks(exc)
    return response.status, _read_chunks(response)


class Fetcher:
    """Runs requests on worker threads and queues the finished ones.

    ``opener(url, proxy, timeout)`` returns the HTTP status code and an
    iterable of body chunks. At most ``max_handles`` requests are in use at
    once; a request stays in use until it is popped from the finished queue.
    """

    def __init__(self, opener: Optional[Opener] = None, max_handles: int = MAX_HANDLE) -> None:
        self._opener = opener or _urllib_open
        self._max_handles = max_handles
        self._busy = 0
        self._closed = False
        self._cond = threading.Condition()
        self._finished: Deque[FetchRequest] = deque()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_handles), thread_name_prefix="cloudpinyin"
        )

    def add_request(
        self, url: str, proxy: str, pinyin: str, callback: CloudPinyinCallback
    ) -> bool:
        """Start a request; return False when no handle is free."""
        with self._cond:
            if self._closed or self._busy >= self._max_handles:
                return False
            self._busy += 1
        request = FetchRequest(url, proxy, pinyin, callback)
        self._executor.submit(self._run, request)
        return True

    def _run(self, request: FetchRequest) -> None:
        try:
            status, chunks = self._opener(request.url, request.proxy, REQUEST_TIMEOUT)
            request.http_code = status
            for chunk in chunks:
                if not request.append(chunk):
                    break
        except Exception as exc:  # network failures end the request
            request.error = exc
        with self._cond:
            self._finished.append(request)
            self._cond.notify_all()

    def pop_finished(self) -> Optional[FetchRequest]:
        """Take the oldest finished request, or None if there is none."""
        with self._cond:
            if not self._finished:
                return None
            self._busy -= 1
            return self._finished.popleft()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until a finished request is queued; return whether one is."""
        with self._cond:
            return self._cond.wait_for(lambda: bool(self._finished), timeout)

    def close(self) -> None:
        """Stop accepting requests and wait for running ones to end."""
        with self._cond:
            self._closed = True
        self._executor.shutdown(wait=True)
        with self._cond:
            self._finished.clear()
            self._busy = 0

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class CloudPinyin:
    """Cached cloud pinyin lookups with error back-off."""

    def __init__(
        self,
        fetcher: Fetcher,
        backend: CloudPinyinBackend = CloudPinyinBackend.GOOGLE_CN,
        minimum_length: int = 4,
        proxy: str = "",
    ) -> None:
        self._fetcher = fetcher
        self.backend = backend
        self.minimum_length = minimum_length
        self.proxy = proxy
        self._cache: LRUCache[str, str] = LRUCache(CACHE_SIZE)
        self._backends: Dict[CloudPinyinBackend, Backend] = {
            CloudPinyinBackend.GOOGLE: GoogleBackend(GOOGLE_URL),
            CloudPinyinBackend.GOOGLE_CN: GoogleBackend(GOOGLE_CN_URL),
            CloudPinyinBackend.BAIDU: BaiduBackend(),
        }
        self._error_count = 0
        self._reset_at: Optional[float] = None

    def error_count(self) -> int:
        """Number of failed requests since the last reset."""
        return self._error_count

    def reset_error(self) -> None:
        """Clear the error count so requests are sent again."""
        self._error_count = 0
        self._reset_at = None

    def _check_reset(self) -> None:
        if self._reset_at is not None and time.monotonic() >= self._reset_at:
            self.reset_error()

    def request(self, pinyin: str, callback: CloudPinyinCallback) -> None:
        """Look up ``pinyin``; ``callback(pinyin, hanzi)`` receives the answer.

        The callback runs at once for short input, cache hits and failures,
        otherwise from :meth:`process_finished`.
        """
        if len(pinyin.encode("utf-8")) < self.minimum_length:
            callback(pinyin, "")
            return
        cached = self._cache.find(pinyin)
        if cached is not None:
            callback(pinyin, cached)
            return
        self._check_reset()
        backend = self._backends.get(self.backend)
        if backend is None or self._error_count >= MAX_ERROR:
            callback(pinyin, "")
            return
        url = backend.request_url(pinyin)
        if not self._fetcher.add_request(url, self.proxy, pinyin, callback):
            callback(pinyin, "")

    def process_finished(self) -> int:
        """Deliver every finished request; return how many were handled."""
        backend = self._backends.get(self.backend)
        handled = 0
        while (item := self._fetcher.pop_finished()) is not None:
            handled += 1
            if item.http_code != 200:
                self._error_count += 1
                if self._error_count == MAX_ERROR:
                    self._reset_at = time.monotonic() + ERROR_RESET_DELAY
            hanzi = backend.parse_result(bytes(item.data)) if backend else ""
            item.callback(item.pinyin, hanzi)
            if hanzi:
                self._cache.insert(item.pinyin, hanzi)
        return handled