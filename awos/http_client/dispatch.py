from __future__ import annotations

import logging
from typing import Dict, Optional

import httpx

from .auth import Clock, SigningStrategy
from .errors import HeaderError, TransportError
from .requests import SignableRequest
from .types import HttpResponse, Method

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


def _response_headers(resp: httpx.Response) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    # 重复的 header 以最后一次出现为准
    for key, value in resp.headers.multi_items():
        headers[key.lower()] = value
    return headers


class Dispatcher:
    """
    把签好名的 SignableRequest 发送出去, 并把 httpx 响应转换为 HttpResponse。

    传入 client 时复用该 AsyncClient (连接池由调用方管理), 否则每次请求
    临时创建一个。
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT):
        self._client = client
        self.timeout = timeout

    async def dispatch(self, request: SignableRequest) -> HttpResponse:
        method = Method.parse(request.method)
        url = request.generate_url()
        headers = request.headers
        content = request.payload

        logger.debug("Dispatching %s %s", method.value, url)
        try:
            if self._client is not None:
                resp = await self._client.request(method.value, url, headers=headers, content=content)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    resp = await client.request(method.value, url, headers=headers, content=content)
        except (UnicodeEncodeError, httpx.LocalProtocolError) as exc:
            raise HeaderError("<request>", str(exc)) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        result = HttpResponse(
            status_code=resp.status_code,
            headers=_response_headers(resp),
            body=resp.content,
        )
        logger.debug("Response %s for %s %s", result.status_code, method.value, url)
        return result

    async def sign_and_dispatch(
        self,
        request: SignableRequest,
        signer: SigningStrategy,
        now: Clock = None,
    ) -> HttpResponse:
        signer.sign_request(request, now=now)
        return await self.dispatch(request)
