# -*- coding: utf-8 -*-
"""
测试公共 fixture

所有网络请求都通过 httpx.MockTransport 在进程内完成, 不访问真实存储服务。
"""

from typing import Callable, List, Optional

import httpx
import pytest
import pytest_asyncio

from awos.config import ConfigService
from awos.http_client import Credentials

TEST_SECRET = "secret"
TEST_KEY_ID = "ID"


class FakeStorage:
    """记录收到的请求, 并按顺序返回预设响应"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responses: List[httpx.Response] = []
        self._handler: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def respond(self, status_code: int = 200, content: bytes = b"", headers: Optional[dict] = None) -> "FakeStorage":
        self._responses.append(httpx.Response(status_code, content=content, headers=headers or {}))
        return self

    def use_handler(self, handler: Callable[[httpx.Request], httpx.Response]) -> "FakeStorage":
        self._handler = handler
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        if self._handler is not None:
            return self._handler(request)
        if self._responses:
            return self._responses.pop(0)
        return httpx.Response(200)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(TEST_KEY_ID, TEST_SECRET)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest_asyncio.fixture
async def http_client(storage):
    async with httpx.AsyncClient(transport=httpx.MockTransport(storage)) as client:
        yield client


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch):
    for key in (
        "AWOS_BACKEND",
        "AWOS_ENDPOINT",
        "AWOS_BUCKET",
        "AWOS_ACCESS_KEY_ID",
        "AWOS_ACCESS_KEY_SECRET",
        "AWOS_REGION",
        "AWOS_SCHEMA",
        "AWOS_TIMEOUT",
        "AWOS_PATH_STYLE",
    ):
        monkeypatch.delenv(key, raising=False)
    ConfigService.clear_cache()
    yield
    ConfigService.clear_cache()
