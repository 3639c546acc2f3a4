from __future__ import annotations

import base64
import datetime as dt
import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.utils import formatdate
from typing import Dict, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from .requests import OSS_META_PREFIX, SignableRequest
from .resources import OSS_SUBRESOURCES, resolve_presign_resource, resolve_resource

logger = logging.getLogger(__name__)

OSS_HEADER_PREFIX = "x-oss-"
S3_HEADER_PREFIX = "x-amz-"
S3_META_PREFIX = "x-amz-meta-"

CONTENT_TYPE = "content-type"
CONTENT_MD5 = "content-md5"

SIGV4_ALGORITHM = "AWS4-HMAC-SHA256"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
# 这些 header 会被代理或 transport 改写, 不参与 V4 签名
_SIGV4_UNSIGNED_HEADERS = frozenset(["authorization", "user-agent", "expect", "x-amzn-trace-id"])

Clock = Union[dt.datetime, int, float, None]
UrlHeaders = Union[Mapping[str, str], Iterable[Tuple[str, str]], None]


def _utc(now: Clock) -> dt.datetime:
    if now is None:
        return dt.datetime.now(dt.timezone.utc)
    if isinstance(now, dt.datetime):
        if now.tzinfo is None:
            return now.replace(tzinfo=dt.timezone.utc)
        return now.astimezone(dt.timezone.utc)
    return dt.datetime.fromtimestamp(now, dt.timezone.utc)


def epoch_seconds(now: Clock = None) -> int:
    return int(_utc(now).timestamp())


def http_date(now: Clock = None) -> str:
    """RFC 1123 格式, 如 Mon, 01 Jan 2024 00:00:00 GMT"""
    return formatdate(_utc(now).timestamp(), usegmt=True)


def hmac_sha1_b64(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def _header_pairs(headers: UrlHeaders) -> Iterable[Tuple[str, str]]:
    if headers is None:
        return []
    if isinstance(headers, Mapping):
        return list(headers.items())
    return list(headers)


@dataclass(frozen=True)
class SignatureContext:
    canonical_resource: str
    canonicalized_headers: str
    content_md5: str
    content_type: str
    date_or_expires: str
    string_to_sign: str


class SigningStrategy(ABC):
    kind: str
    header_prefix: str
    meta_prefix: str

    @abstractmethod
    def sign_request(self, request: SignableRequest, now: Clock = None) -> str:
        """签名请求, 把认证相关 header 写回 request 并返回 Authorization 值"""

    @abstractmethod
    def sign_url(
        self,
        request: SignableRequest,
        expires: int,
        raw_subresource: str = "",
        headers: UrlHeaders = None,
        now: Clock = None,
    ) -> str:
        """生成预签名 URL, expires 为过期时刻的 epoch 秒"""


class OssSigner(SigningStrategy):
    kind = "oss"
    scheme = "OSS"
    header_prefix = OSS_HEADER_PREFIX
    meta_prefix = OSS_META_PREFIX

    def build_context(self, request: SignableRequest) -> SignatureContext:
        headers = request.headers
        date = headers.get("date", "")
        # Content-MD5 的值本身就是 base64 后的摘要, 原样参与签名
        content_md5 = headers.get(CONTENT_MD5, "")
        content_type = headers.get(CONTENT_TYPE, "")
        canonical_headers = "".join(
            f"{k}:{v}\n" for k, v in headers.items() if self.header_prefix in k
        )
        resource = resolve_resource(request.bucket, request.object, request.params, OSS_SUBRESOURCES)
        string_to_sign = "\n".join(
            [request.method.value, content_md5, content_type, date, canonical_headers + resource]
        )
        return SignatureContext(
            canonical_resource=resource,
            canonicalized_headers=canonical_headers,
            content_md5=content_md5,
            content_type=content_type,
            date_or_expires=date,
            string_to_sign=string_to_sign,
        )

    def sign_request(self, request: SignableRequest, now: Clock = None) -> str:
        if not request.get_header("date"):
            request.add_header("date", http_date(now))
        ctx = self.build_context(request)
        logger.debug("OSS string to sign: %r", ctx.string_to_sign)
        signature = hmac_sha1_b64(request.credentials.access_key_secret, ctx.string_to_sign)
        authorization = f"{self.scheme} {request.credentials.access_key_id}:{signature}"
        request.add_header("authorization", authorization)
        request.seal()
        return authorization

    def build_url_context(
        self,
        request: SignableRequest,
        expires: int,
        raw_subresource: str = "",
        headers: UrlHeaders = None,
    ) -> SignatureContext:
        content_type = ""
        content_md5 = ""
        canonical_headers = ""
        # 按调用方给出的顺序拼接, 不重新排序
        for key, value in _header_pairs(headers):
            if key.startswith(self.header_prefix):
                canonical_headers += f"{key}:{value}\n"
            elif key == CONTENT_TYPE:
                content_type = value
            elif key == CONTENT_MD5:
                content_md5 = value
        resource = resolve_presign_resource(request.bucket, request.object, raw_subresource)
        string_to_sign = "\n".join(
            [request.method.value, content_md5, content_type, str(expires), canonical_headers + resource]
        )
        return SignatureContext(
            canonical_resource=resource,
            canonicalized_headers=canonical_headers,
            content_md5=content_md5,
            content_type=content_type,
            date_or_expires=str(expires),
            string_to_sign=string_to_sign,
        )

    def sign_url(
        self,
        request: SignableRequest,
        expires: int,
        raw_subresource: str = "",
        headers: UrlHeaders = None,
        now: Clock = None,
    ) -> str:
        ctx = self.build_url_context(request, expires, raw_subresource, headers)
        logger.debug("OSS url string to sign: %r", ctx.string_to_sign)
        signature = hmac_sha1_b64(request.credentials.access_key_secret, ctx.string_to_sign)
        auth_params = (
            f"OSSAccessKeyId={request.credentials.access_key_id}"
            f"&Expires={expires}"
            f"&Signature={quote(signature, safe='')}"
        )
        query = f"{raw_subresource}&{auth_params}" if raw_subresource else auth_params
        return f"{request.schema}://{request.host}{request.path}?{query}"


def _canonical_query(params: Mapping[str, Optional[str]]) -> str:
    encoded = []
    for key, value in params.items():
        encoded.append((quote(key, safe="-_.~"), quote(value or "", safe="-_.~")))
    encoded.sort()
    return "&".join(f"{k}={v}" for k, v in encoded)


def _normalize_ws(value: str) -> str:
    return " ".join(value.strip().split())


class S3Signer(SigningStrategy):
    """AWS Signature Version 4, 适用于 AWS S3 / MinIO 等 S3 兼容服务"""

    kind = "s3"
    header_prefix = S3_HEADER_PREFIX
    meta_prefix = S3_META_PREFIX
    service = "s3"

    def signing_key(self, secret: str, datestamp: str, region: str) -> bytes:
        k_date = _hmac_sha256(("AWS4" + secret).encode("utf-8"), datestamp)
        k_region = _hmac_sha256(k_date, region)
        k_service = _hmac_sha256(k_region, self.service)
        return _hmac_sha256(k_service, "aws4_request")

    def _scope(self, datestamp: str, region: str) -> str:
        return "/".join([datestamp, region, self.service, "aws4_request"])

    def _signature(self, request: SignableRequest, datestamp: str, amz_date: str, canonical_request: str) -> str:
        hashed_request = hashlib.sha256(canonical_request.encode("utf-8")).hexdigest()
        scope = self._scope(datestamp, request.region)
        string_to_sign = "\n".join([SIGV4_ALGORITHM, amz_date, scope, hashed_request])
        logger.debug("S3 canonical request: %r", canonical_request)
        key = self.signing_key(request.credentials.access_key_secret, datestamp, request.region)
        return hmac.new(key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()

    def sign_request(self, request: SignableRequest, now: Clock = None) -> str:
        utc_now = _utc(now)
        amz_date = request.get_header("x-amz-date") or utc_now.strftime("%Y%m%dT%H%M%SZ")
        datestamp = amz_date[:8]
        payload_hash = hashlib.sha256(request.payload or b"").hexdigest()

        request.add_header("x-amz-date", amz_date)
        request.add_header("x-amz-content-sha256", payload_hash)
        if not request.get_header("host"):
            request.add_header("host", request.host)

        headers = {k: v for k, v in request.headers.items() if k not in _SIGV4_UNSIGNED_HEADERS}
        signed_headers = ";".join(headers)
        canonical_headers = "".join(f"{k}:{_normalize_ws(v)}\n" for k, v in headers.items())
        canonical_request = "\n".join(
            [
                request.method.value,
                request.path,
                _canonical_query(request.params),
                canonical_headers,
                signed_headers,
                payload_hash,
            ]
        )
        signature = self._signature(request, datestamp, amz_date, canonical_request)
        credential = f"{request.credentials.access_key_id}/{self._scope(datestamp, request.region)}"
        authorization = (
            f"{SIGV4_ALGORITHM} Credential={credential}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )
        request.add_header("authorization", authorization)
        request.seal()
        return authorization

    def sign_url(
        self,
        request: SignableRequest,
        expires: int,
        raw_subresource: str = "",
        headers: UrlHeaders = None,
        now: Clock = None,
    ) -> str:
        utc_now = _utc(now)
        amz_date = utc_now.strftime("%Y%m%dT%H%M%SZ")
        datestamp = amz_date[:8]
        lifetime = max(1, int(expires) - int(utc_now.timestamp()))
        # host 之外, 调用方给出的 header 也参与签名, 访问时需带上相同的值
        signed: Dict[str, str] = {"host": request.host}
        for key, value in _header_pairs(headers):
            signed[str(key).strip().lower()] = _normalize_ws(str(value))
        signed = dict(sorted(signed.items()))
        signed_headers = ";".join(signed)

        params: Dict[str, Optional[str]] = {}
        if raw_subresource:
            for item in raw_subresource.split("&"):
                key, sep, value = item.partition("=")
                params[key] = value if sep else None
        params.update(
            {
                "X-Amz-Algorithm": SIGV4_ALGORITHM,
                "X-Amz-Credential": f"{request.credentials.access_key_id}/{self._scope(datestamp, request.region)}",
                "X-Amz-Date": amz_date,
                "X-Amz-Expires": str(lifetime),
                "X-Amz-SignedHeaders": signed_headers,
            }
        )
        canonical_query = _canonical_query(params)
        canonical_request = "\n".join(
            [
                request.method.value,
                request.path,
                canonical_query,
                "".join(f"{k}:{v}\n" for k, v in signed.items()),
                signed_headers,
                UNSIGNED_PAYLOAD,
            ]
        )
        signature = self._signature(request, datestamp, amz_date, canonical_request)
        return f"{request.schema}://{request.host}{request.path}?{canonical_query}&X-Amz-Signature={signature}"


SIGNERS: Dict[str, SigningStrategy] = {
    OssSigner.kind: OssSigner(),
    S3Signer.kind: S3Signer(),
}


def get_signer(kind: str) -> SigningStrategy:
    normalized = str(kind or "").strip().lower()
    try:
        return SIGNERS[normalized]
    except KeyError:
        raise ValueError(f"Unsupported signing backend: {kind!r}") from None


__all__ = [
    "Clock",
    "epoch_seconds",
    "OssSigner",
    "S3Signer",
    "SignatureContext",
    "SigningStrategy",
    "get_signer",
    "hmac_sha1_b64",
    "http_date",
]
