from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Collection, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

import httpx

from awos.adapters.listing import parse_list_objects
from awos.adapters.types import (
    GetAsBufferResp,
    GetResp,
    ListDetailsResp,
    ListOptions,
    PutOrCopyOptions,
    SignUrlOptions,
    StorageProfile,
)
from awos.http_client import (
    Credentials,
    DecodingError,
    Dispatcher,
    HttpResponse,
    Method,
    Schema,
    ServiceError,
    SignableRequest,
    SigningStrategy,
)
from awos.http_client.auth import Clock, epoch_seconds
from awos.http_client.dispatch import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

Payload = Union[bytes, bytearray, memoryview, str]


def split_endpoint(value: str) -> Tuple[Optional[Schema], str]:
    """'https://host/' -> (Schema.HTTPS, 'host'); 不带协议时 schema 为 None"""
    text = (value or "").strip()
    schema = None
    if "://" in text:
        prefix, text = text.split("://", 1)
        schema = Schema.parse(prefix)
    return schema, text.split("/", 1)[0]


def as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


class BaseAdapter(ABC):
    """
    存储后端的统一能力接口。

    子类只负责请求的寻址 (endpoint / bucket / object) 和少量后端专有的 header,
    签名、发送与响应归一化都在这里完成。
    """

    signer: SigningStrategy
    copy_source_header: str
    metadata_directive_header: str

    def __init__(self, profile: StorageProfile, *, client: Optional[httpx.AsyncClient] = None):
        self.profile = profile
        cfg = profile.config or {}

        self.bucket: str = str(cfg.get("bucket") or "").strip()
        access_key_id = str(cfg.get("access_key_id") or "")
        access_key_secret = str(cfg.get("access_key_secret") or "")
        if not access_key_id or not access_key_secret:
            raise ValueError(f"{profile.type} requires access_key_id and access_key_secret")
        self.credentials = Credentials(access_key_id, access_key_secret)

        schema, host = split_endpoint(str(cfg.get("endpoint") or ""))
        if not host:
            raise ValueError(f"{profile.type} requires endpoint")
        self.endpoint_host = host
        self.schema = schema or Schema.parse(cfg.get("schema"))

        self.timeout: float = float(cfg.get("timeout") or DEFAULT_TIMEOUT)
        self.dispatcher = Dispatcher(client, timeout=self.timeout)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(bucket={self.bucket!r}, endpoint={self.endpoint_host!r})"

    @property
    def meta_prefix(self) -> str:
        return self.signer.meta_prefix

    @abstractmethod
    def new_request(self, method: Union[Method, str], key: str = "", *, for_url: bool = False) -> SignableRequest:
        """构造指向 key 的请求; for_url 为 True 时用于生成对外的预签名 URL"""

    # ========== 内部工具 ==========

    async def _execute(self, request: SignableRequest, now: Clock = None) -> HttpResponse:
        resp = await self.dispatcher.sign_and_dispatch(request, self.signer, now=now)
        if not resp.is_success:
            error = ServiceError(resp.status_code, resp.body, resp.headers)
            logger.warning(
                "%s %s/%s failed: %s %s",
                request.method.value,
                self.bucket,
                request.object,
                resp.status_code,
                error.code or error.reason,
            )
            raise error
        return resp

    def _copy_source(self, src: str) -> str:
        # 以 / 开头视为已带 bucket 的完整路径
        if src.startswith("/"):
            path = src
        else:
            path = f"/{self.bucket}/{src}"
        return quote(path, safe="/-_.~")

    @staticmethod
    def _to_bytes(data: Payload) -> bytes:
        if isinstance(data, str):
            return data.encode("utf-8")
        return bytes(data)

    # ========== 能力接口 ==========

    async def list_object(self, opts: Optional[ListOptions] = None) -> List[str]:
        details = await self.list_details(opts)
        return details.to_obj_names()

    async def list_details(self, opts: Optional[ListOptions] = None) -> ListDetailsResp:
        request = self.new_request(Method.GET)
        if opts is not None:
            request.set_params(opts.to_params())
        logger.info("Listing %s with %s", self.bucket, request.params)
        resp = await self._execute(request)
        return parse_list_objects(resp.body)

    async def get_as_buffer(self, key: str, meta_keys_filter: Optional[Collection[str]] = None) -> GetAsBufferResp:
        request = self.new_request(Method.GET, key)
        logger.info("Getting %s/%s", self.bucket, key)
        resp = await self._execute(request)
        result = GetAsBufferResp.from_response(resp, self.meta_prefix)
        result.filter_meta(meta_keys_filter, self.meta_prefix)
        return result

    async def get(self, key: str, meta_keys_filter: Optional[Collection[str]] = None) -> GetResp:
        buf = await self.get_as_buffer(key, meta_keys_filter)
        try:
            content = buf.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodingError(f"Object {key!r} is not valid UTF-8: {exc}") from exc
        return GetResp(content=content, meta=buf.meta, headers=buf.headers)

    async def head(self, key: str) -> Dict[str, str]:
        request = self.new_request(Method.HEAD, key)
        logger.info("Head %s/%s", self.bucket, key)
        resp = await self._execute(request)
        # header 与 meta 合并返回
        return dict(resp.headers)

    async def put(self, key: str, data: Payload, opts: Optional[PutOrCopyOptions] = None) -> None:
        request = self.new_request(Method.PUT, key)
        size = request.load_payload(self._to_bytes(data))
        if opts is not None:
            request.add_headers(opts.to_headers())
            request.add_meta(opts.meta)
        logger.info("Putting %s/%s (%d bytes)", self.bucket, key, size)
        await self._execute(request)

    async def copy(self, src: str, key: str, opts: Optional[PutOrCopyOptions] = None) -> None:
        request = self.new_request(Method.PUT, key)
        request.add_header(self.copy_source_header, self._copy_source(src))
        if opts is not None:
            headers = opts.to_headers()
            if headers or opts.meta:
                request.add_header(self.metadata_directive_header, "REPLACE")
            request.add_headers(headers)
            request.add_meta(opts.meta)
        logger.info("Copying %s to %s/%s", src, self.bucket, key)
        await self._execute(request)

    async def delete(self, key: str) -> None:
        request = self.new_request(Method.DELETE, key)
        logger.info("Deleting %s/%s", self.bucket, key)
        await self._execute(request)

    async def delete_multi(self, keys: Collection[str]) -> None:
        # 逐个删除, 遇到第一个失败即中止
        for key in keys:
            await self.delete(key)

    def sign_url(self, key: str, opts: Optional[SignUrlOptions] = None, now: Clock = None) -> str:
        opts = opts or SignUrlOptions()
        request = self.new_request(opts.method, key, for_url=True)
        expires = opts.expires_at(epoch_seconds(now))
        return self.signer.sign_url(request, expires, now=now)


__all__ = ["BaseAdapter", "Payload", "as_bool", "split_endpoint"]
