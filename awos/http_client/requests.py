from __future__ import annotations

import base64
import hashlib
import re
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from .errors import ConstructionError, HeaderError
from .types import Credentials, Method, Schema

OSS_META_PREFIX = "x-oss-meta-"

_TOKEN_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9a-z]+$")
_ILLEGAL_VALUE_CHARS = ("\r", "\n", "\0")
# httpx 发送前会折叠这些路径段, 导致实际路径与签名不一致
_DOT_SEGMENTS = frozenset([".", ".."])

HeaderItems = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def _iter_pairs(items: HeaderItems) -> Iterator[Tuple[str, str]]:
    if isinstance(items, Mapping):
        return iter(items.items())
    return iter(items)


def _check_header(key: str, value: str) -> None:
    if not key or not _TOKEN_RE.match(key):
        raise HeaderError(key, "name is not a valid HTTP token")
    if any(ch in value for ch in _ILLEGAL_VALUE_CHARS):
        raise HeaderError(key, "value contains CR, LF or NUL")
    try:
        value.encode("ascii")
    except UnicodeEncodeError:
        raise HeaderError(key, "value is not ASCII") from None


def _quote_param(value: str) -> str:
    return quote(value, safe="-_.~")


class SignableRequest:
    """
    一次存储请求的可签名表示。

    headers 的 key 统一小写并按 key 排序保存, params 同样按 key 排序,
    签名后请求被封存, 之后的任何修改都会抛出 ConstructionError。
    """

    def __init__(
        self,
        method: Union[Method, str],
        bucket: str,
        object: str,
        credentials: Credentials,
        *,
        endpoint: str,
        schema: Union[Schema, str, None] = Schema.HTTP,
        region: str = "",
        meta_prefix: str = OSS_META_PREFIX,
    ):
        self.method = Method.parse(method)
        self.bucket = bucket or ""
        self.object = (object or "").lstrip("/")
        if any(seg in _DOT_SEGMENTS for seg in self.object.split("/")):
            raise ConstructionError(f"Object key must not contain . or .. path segments: {object!r}")
        self.credentials = credentials
        self.endpoint = endpoint.strip().rstrip("/")
        self.schema = Schema.parse(schema)
        self.region = region
        self.meta_prefix = meta_prefix
        self.payload: Optional[bytes] = None
        self._headers: Dict[str, str] = {}
        self._params: Dict[str, Optional[str]] = {}
        self._sealed = False

    def __repr__(self) -> str:
        return (
            f"SignableRequest(method={self.method.value}, bucket={self.bucket!r}, "
            f"object={self.object!r}, endpoint={self.endpoint!r})"
        )

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self._headers)

    @property
    def params(self) -> Dict[str, Optional[str]]:
        return dict(self._params)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        self._sealed = True

    def _ensure_mutable(self) -> None:
        if self._sealed:
            raise ConstructionError("Request is already signed and can no longer be modified")

    # ========== headers ==========

    def add_header(self, key: str, value: object) -> "SignableRequest":
        self._ensure_mutable()
        key_lower = str(key).strip().lower()
        value_str = str(value).strip()
        _check_header(key_lower, value_str)
        self._headers[key_lower] = value_str
        self._headers = dict(sorted(self._headers.items()))
        return self

    def add_headers(self, headers: HeaderItems) -> "SignableRequest":
        for key, value in _iter_pairs(headers):
            self.add_header(key, value)
        return self

    def remove_header(self, key: str) -> "SignableRequest":
        self._ensure_mutable()
        self._headers.pop(key.strip().lower(), None)
        return self

    def get_header(self, key: str, default: str = "") -> str:
        return self._headers.get(key.lower(), default)

    def add_meta(self, meta: HeaderItems) -> "SignableRequest":
        for key, value in _iter_pairs(meta):
            key_lower = str(key).strip().lower()
            if not key_lower.startswith(self.meta_prefix):
                key_lower = self.meta_prefix + key_lower
            self.add_header(key_lower, value)
        return self

    def set_content_type(self, content_type: str) -> "SignableRequest":
        return self.add_header("content-type", content_type)

    def set_content_md5(self) -> "SignableRequest":
        digest = hashlib.md5(self.payload or b"").digest()
        return self.add_header("content-md5", base64.b64encode(digest).decode("ascii"))

    # ========== params ==========

    def add_param(self, key: str, value: Optional[object] = None) -> "SignableRequest":
        self._ensure_mutable()
        self._params[str(key)] = None if value is None else str(value)
        self._params = dict(sorted(self._params.items()))
        return self

    def set_params(self, params: Mapping[str, Optional[object]]) -> "SignableRequest":
        self._ensure_mutable()
        self._params = {}
        for key, value in params.items():
            self.add_param(key, value)
        return self

    # ========== payload ==========

    def load_payload(self, payload: Union[bytes, bytearray, memoryview]) -> int:
        self._ensure_mutable()
        self.payload = bytes(payload)
        return len(self.payload)

    def unload_payload(self) -> Optional[bytes]:
        self._ensure_mutable()
        payload, self.payload = self.payload, None
        return payload

    # ========== url ==========

    @property
    def host(self) -> str:
        if self.bucket:
            return f"{self.bucket}.{self.endpoint}"
        return self.endpoint

    @property
    def path(self) -> str:
        return "/" + quote(self.object, safe="/-_.~")

    def query_string(self) -> str:
        parts = []
        for key, value in self._params.items():
            if value is None:
                parts.append(_quote_param(key))
            else:
                parts.append(f"{_quote_param(key)}={_quote_param(value)}")
        return "&".join(parts)

    def generate_url(self) -> str:
        url = f"{self.schema}://{self.host}{self.path}"
        query = self.query_string()
        if query:
            url += "?" + query
        return url
