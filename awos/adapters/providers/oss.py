from typing import Optional, Union

import httpx

from awos.adapters.types import SignUrlOptions, StorageProfile
from awos.http_client import (
    OSS_META_PREFIX,
    Method,
    OssSigner,
    SignableRequest,
)
from awos.http_client.auth import Clock, UrlHeaders, epoch_seconds
from awos.regions import Region

from .base import BaseAdapter


class OssAdapter(BaseAdapter):
    """阿里云 OSS (V1 签名)"""

    signer = OssSigner()
    copy_source_header = "x-oss-copy-source"
    metadata_directive_header = "x-oss-metadata-directive"

    def __init__(self, profile: StorageProfile, *, client: Optional[httpx.AsyncClient] = None):
        super().__init__(profile, client=client)
        self.region = Region.parse(self.endpoint_host)

    def new_request(self, method: Union[Method, str], key: str = "", *, for_url: bool = False) -> SignableRequest:
        # 内网 endpoint 只用于服务端请求, 对外 URL 始终走公网
        endpoint = self.region.public_endpoint if for_url else self.region.endpoint
        return SignableRequest(
            method,
            self.bucket,
            key,
            self.credentials,
            endpoint=endpoint,
            schema=self.schema,
            region=self.region.region_id,
            meta_prefix=OSS_META_PREFIX,
        )

    def get_signed_url(
        self,
        object: str,
        verb: Union[Method, str] = Method.GET,
        expires: Optional[int] = None,
        params: str = "",
        headers: UrlHeaders = None,
        now: Clock = None,
    ) -> str:
        """
        按 OSS 协议生成预签名 URL。

        expires 为过期时刻 (epoch 秒), 缺省为一小时后; params 是原样参与签名的子资源, 如 "acl" 或
        "x-oss-process=image/resize,w_100"; headers 里的 x-oss-* / content-type /
        content-md5 会参与签名, 访问时需带上相同的 header。
        """
        if expires is None:
            expires = SignUrlOptions().expires_at(epoch_seconds(now))
        request = self.new_request(verb, object, for_url=True)
        return self.signer.sign_url(request, expires, raw_subresource=params, headers=headers)


def _factory(profile: StorageProfile, client: Optional[httpx.AsyncClient] = None) -> OssAdapter:
    return OssAdapter(profile, client=client)


ADAPTER_TYPE = "oss"
CONFIG_SCHEMA = [
    {"key": "endpoint", "label": "Endpoint", "type": "string", "required": True, "placeholder": "https://oss-cn-beijing.aliyuncs.com"},
    {"key": "bucket", "label": "Bucket", "type": "string", "required": True},
    {"key": "access_key_id", "label": "AccessKey ID", "type": "string", "required": True},
    {"key": "access_key_secret", "label": "AccessKey Secret", "type": "password", "required": True},
    {"key": "schema", "label": "协议", "type": "string", "required": False, "default": "http"},
    {"key": "timeout", "label": "超时(秒)", "type": "number", "required": False, "default": 60},
]
ADAPTER_FACTORY = _factory
