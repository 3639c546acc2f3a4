from typing import Collection, Dict, List, Optional

import httpx

from awos.adapters.providers.base import BaseAdapter, Payload
from awos.adapters.registry import create_adapter
from awos.adapters.types import (
    GetAsBufferResp,
    GetResp,
    ListDetailsResp,
    ListOptions,
    PutOrCopyOptions,
    SignUrlOptions,
    StorageProfile,
)
from awos.config import ConfigService
from awos.http_client.auth import Clock


class AwosClient:
    """
    统一的对象存储客户端。

    OSS 与 S3 兼容服务暴露同一组能力, 具体请求由注册表中对应的适配器完成::

        client = AwosClient.new_with_oss("https://oss-cn-beijing.aliyuncs.com", "bucket", "id", "secret")
        await client.put("a.txt", b"hello")
        url = client.sign_url("a.txt")
    """

    def __init__(self, adapter: BaseAdapter):
        self.adapter = adapter

    def __repr__(self) -> str:
        return f"AwosClient({self.adapter!r})"

    @property
    def backend(self) -> str:
        return self.adapter.profile.type

    @classmethod
    def from_profile(cls, profile: StorageProfile, client: Optional[httpx.AsyncClient] = None) -> "AwosClient":
        return cls(create_adapter(profile, client=client))

    @classmethod
    def from_env(cls, client: Optional[httpx.AsyncClient] = None) -> "AwosClient":
        return cls.from_profile(ConfigService.load_profile(), client=client)

    @classmethod
    def new_with_oss(
        cls,
        endpoint: str,
        bucket: str,
        access_key_id: str,
        access_key_secret: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "AwosClient":
        """endpoint 可带 http(s):// 前缀, 据此决定协议; 也可以是区域名 (如 "北京")"""
        profile = StorageProfile(
            type="oss",
            config={
                "endpoint": endpoint,
                "bucket": bucket,
                "access_key_id": access_key_id,
                "access_key_secret": access_key_secret,
            },
        )
        return cls.from_profile(profile, client=client)

    @classmethod
    def new_with_s3(
        cls,
        endpoint: str,
        bucket: str,
        access_key_id: str,
        access_key_secret: str,
        region: str = "us-east-1",
        path_style: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ) -> "AwosClient":
        profile = StorageProfile(
            type="s3",
            config={
                "endpoint": endpoint,
                "bucket": bucket,
                "access_key_id": access_key_id,
                "access_key_secret": access_key_secret,
                "region": region,
                "path_style": path_style,
            },
        )
        return cls.from_profile(profile, client=client)

    async def list_object(self, opts: Optional[ListOptions] = None) -> List[str]:
        return await self.adapter.list_object(opts)

    async def list_details(self, opts: Optional[ListOptions] = None) -> ListDetailsResp:
        return await self.adapter.list_details(opts)

    async def get(self, key: str, meta_keys_filter: Optional[Collection[str]] = None) -> GetResp:
        return await self.adapter.get(key, meta_keys_filter)

    async def get_as_buffer(self, key: str, meta_keys_filter: Optional[Collection[str]] = None) -> GetAsBufferResp:
        return await self.adapter.get_as_buffer(key, meta_keys_filter)

    async def head(self, key: str) -> Dict[str, str]:
        return await self.adapter.head(key)

    async def put(self, key: str, data: Payload, opts: Optional[PutOrCopyOptions] = None) -> None:
        await self.adapter.put(key, data, opts)

    async def copy(self, src: str, key: str, opts: Optional[PutOrCopyOptions] = None) -> None:
        await self.adapter.copy(src, key, opts)

    async def delete(self, key: str) -> None:
        await self.adapter.delete(key)

    async def delete_multi(self, keys: Collection[str]) -> None:
        await self.adapter.delete_multi(keys)

    def sign_url(self, key: str, opts: Optional[SignUrlOptions] = None, now: Clock = None) -> str:
        return self.adapter.sign_url(key, opts, now=now)
