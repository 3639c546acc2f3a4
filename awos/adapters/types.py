import time
from typing import Any, Collection, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from awos.http_client import HttpResponse


class ObjectDetails(BaseModel):
    key: str = ""
    last_modified: str = ""
    e_tag: str = ""
    size: str = ""


class ListDetailsResp(BaseModel):
    is_truncated: bool = False
    objects: List[ObjectDetails] = Field(default_factory=list)
    prefix: str = ""
    next_marker: str = ""
    common_prefixes: List[str] = Field(default_factory=list)

    def to_obj_names(self) -> List[str]:
        return [obj.key for obj in self.objects]


class GetAsBufferResp(BaseModel):
    content: bytes = b""
    meta: Dict[str, str] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, resp: HttpResponse, meta_prefix: str) -> "GetAsBufferResp":
        meta: Dict[str, str] = {}
        headers: Dict[str, str] = {}
        for key, value in resp.headers.items():
            if key.startswith(meta_prefix):
                meta[key] = value
            else:
                headers[key] = value
        return cls(content=resp.body, meta=meta, headers=headers)

    def filter_meta(self, meta_keys_filter: Optional[Collection[str]], meta_prefix: str) -> None:
        """只保留 meta_keys_filter 中列出的 meta, 为 None 时不过滤"""
        if meta_keys_filter is None:
            return
        wanted = set(meta_keys_filter)
        self.meta = {
            k: v
            for k, v in self.meta.items()
            if k in wanted or k[len(meta_prefix):] in wanted
        }


class GetResp(BaseModel):
    content: str = ""
    meta: Dict[str, str] = Field(default_factory=dict)
    headers: Dict[str, str] = Field(default_factory=dict)


class ListOptions(BaseModel):
    prefix: str = ""
    marker: str = ""
    delimiter: str = ""
    max_keys: int = 1000

    @field_validator("max_keys")
    @classmethod
    def _check_max_keys(cls, v: int):
        if v <= 0:
            raise ValueError("max_keys must be positive")
        return v

    def to_params(self) -> Dict[str, str]:
        params: Dict[str, str] = {}
        if self.prefix:
            params["prefix"] = self.prefix
        if self.marker:
            params["marker"] = self.marker
        if self.delimiter:
            params["delimiter"] = self.delimiter
        params["max-keys"] = str(self.max_keys)
        return params


class PutOrCopyOptions(BaseModel):
    meta: List[Tuple[str, str]] = Field(default_factory=list)
    content_type: str = ""
    cache_control: str = ""
    content_disposition: str = ""
    content_encoding: str = ""

    @field_validator("meta", mode="before")
    @classmethod
    def _normalize_meta(cls, v: Any):
        if v is None:
            return []
        if isinstance(v, dict):
            return list(v.items())
        return list(v)

    def to_headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        for key, value in (
            ("content-type", self.content_type),
            ("cache-control", self.cache_control),
            ("content-disposition", self.content_disposition),
            ("content-encoding", self.content_encoding),
        ):
            if value:
                headers[key] = value
        return headers


class SignUrlOptions(BaseModel):
    method: str = "GET"
    # 有效期, 单位秒
    expires: int = 3600

    def expires_at(self, now: Optional[float] = None) -> int:
        return int(now if now is not None else time.time()) + self.expires


class StorageProfile(BaseModel):
    type: str
    config: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, v: str):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("type required")
        return v.strip().lower()
