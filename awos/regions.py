from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

OSS_DOMAIN = "aliyuncs.com"
INTERNAL_SUFFIX = "-internal"

# (中文名, region id)
_OSS_REGIONS: Tuple[Tuple[str, str], ...] = (
    ("杭州", "cn-hangzhou"),
    ("上海", "cn-shanghai"),
    ("青岛", "cn-qingdao"),
    ("北京", "cn-beijing"),
    ("张家口", "cn-zhangjiakou"),
    ("呼和浩特", "cn-huhehaote"),
    ("乌兰察布", "cn-wulanchabu"),
    ("深圳", "cn-shenzhen"),
    ("河源", "cn-heyuan"),
    ("广州", "cn-guangzhou"),
    ("成都", "cn-chengdu"),
    ("香港", "cn-hongkong"),
    ("美国西部", "us-west-1"),
    ("美国东部", "us-east-1"),
    ("新加坡", "ap-southeast-1"),
    ("悉尼", "ap-southeast-2"),
    ("吉隆坡", "ap-southeast-3"),
    ("雅加达", "ap-southeast-5"),
    ("马尼拉", "ap-southeast-6"),
    ("孟买", "ap-south-1"),
    ("东京", "ap-northeast-1"),
    ("首尔", "ap-northeast-2"),
    ("法兰克福", "eu-central-1"),
    ("伦敦", "eu-west-1"),
    ("迪拜", "me-east-1"),
)

_BY_NAME: Dict[str, str] = {name: region_id for name, region_id in _OSS_REGIONS}
_KNOWN_IDS = frozenset(region_id for _, region_id in _OSS_REGIONS)

DEFAULT_REGION_ID = "cn-hangzhou"


@dataclass(frozen=True)
class Region:
    """
    OSS 区域。

    internal 为 True 时请求走内网 endpoint, 预签名 URL 始终使用公网 endpoint。
    非阿里云的 host (自建/兼容服务) 原样保存在 custom_endpoint 中。
    """

    region_id: str = DEFAULT_REGION_ID
    internal: bool = False
    custom_endpoint: str = ""

    @classmethod
    def parse(cls, value: str | None) -> "Region":
        text = (value or "").strip()
        if not text:
            return cls()
        if text in _BY_NAME:
            return cls(_BY_NAME[text])

        host = text.split("://", 1)[-1].split("/", 1)[0].lower()
        if host.endswith("." + OSS_DOMAIN):
            label = host[: -len(OSS_DOMAIN) - 1]
            internal = label.endswith(INTERNAL_SUFFIX)
            if internal:
                label = label[: -len(INTERNAL_SUFFIX)]
            if label.startswith("oss-"):
                label = label[len("oss-"):]
            return cls(label, internal=internal)

        if host.startswith("oss-"):
            host = host[len("oss-"):]
        internal = host.endswith(INTERNAL_SUFFIX)
        if internal:
            host = host[: -len(INTERNAL_SUFFIX)]
        if host in _KNOWN_IDS:
            return cls(host, internal=internal)
        return cls(region_id="", custom_endpoint=text.split("://", 1)[-1].rstrip("/"))

    @property
    def public_endpoint(self) -> str:
        if self.custom_endpoint:
            return self.custom_endpoint
        return f"oss-{self.region_id}.{OSS_DOMAIN}"

    @property
    def endpoint(self) -> str:
        if self.custom_endpoint or not self.internal:
            return self.public_endpoint
        return f"oss-{self.region_id}{INTERNAL_SUFFIX}.{OSS_DOMAIN}"

    def __str__(self) -> str:
        return self.region_id or self.custom_endpoint
