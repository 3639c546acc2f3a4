from typing import Optional, Union

import httpx

from awos.adapters.types import StorageProfile
from awos.http_client import S3_META_PREFIX, Method, S3Signer, SignableRequest

from .base import BaseAdapter, as_bool

DEFAULT_REGION = "us-east-1"


class S3Adapter(BaseAdapter):
    """
    S3 兼容存储 (AWS S3 / MinIO / Ceph RGW 等), Signature V4。

    默认使用 path-style 寻址 (http://endpoint/bucket/key), 自建服务通常只支持这种方式;
    path_style 关闭时使用 virtual-hosted 寻址 (http://bucket.endpoint/key)。
    """

    signer = S3Signer()
    copy_source_header = "x-amz-copy-source"
    metadata_directive_header = "x-amz-metadata-directive"

    def __init__(self, profile: StorageProfile, *, client: Optional[httpx.AsyncClient] = None):
        super().__init__(profile, client=client)
        cfg = profile.config or {}
        self.region: str = str(cfg.get("region") or DEFAULT_REGION).strip()
        self.path_style: bool = as_bool(cfg.get("path_style", True))

    def new_request(self, method: Union[Method, str], key: str = "", *, for_url: bool = False) -> SignableRequest:
        key = (key or "").lstrip("/")
        if self.path_style:
            bucket = ""
            object = f"{self.bucket}/{key}" if key else self.bucket
        else:
            bucket = self.bucket
            object = key
        return SignableRequest(
            method,
            bucket,
            object,
            self.credentials,
            endpoint=self.endpoint_host,
            schema=self.schema,
            region=self.region,
            meta_prefix=S3_META_PREFIX,
        )


def _factory(profile: StorageProfile, client: Optional[httpx.AsyncClient] = None) -> S3Adapter:
    return S3Adapter(profile, client=client)


ADAPTER_TYPE = "s3"
CONFIG_SCHEMA = [
    {"key": "endpoint", "label": "Endpoint", "type": "string", "required": True, "placeholder": "http://127.0.0.1:9000"},
    {"key": "bucket", "label": "Bucket", "type": "string", "required": True},
    {"key": "access_key_id", "label": "Access Key", "type": "string", "required": True},
    {"key": "access_key_secret", "label": "Secret Key", "type": "password", "required": True},
    {"key": "region", "label": "Region", "type": "string", "required": False, "default": DEFAULT_REGION},
    {"key": "path_style", "label": "Path-Style 寻址", "type": "boolean", "required": False, "default": True},
    {"key": "schema", "label": "协议", "type": "string", "required": False, "default": "http"},
    {"key": "timeout", "label": "超时(秒)", "type": "number", "required": False, "default": 60},
]
ADAPTER_FACTORY = _factory
