from typing import FrozenSet, Iterable, Mapping, Optional, Tuple

# OSS 识别的子资源, 只有这些 query 参数参与签名
OSS_SUBRESOURCES: FrozenSet[str] = frozenset(
    [
        "acl",
        "uploads",
        "location",
        "cors",
        "logging",
        "website",
        "referer",
        "lifecycle",
        "delete",
        "append",
        "tagging",
        "objectMeta",
        "uploadId",
        "partNumber",
        "security-token",
        "position",
        "img",
        "style",
        "styleName",
        "replication",
        "replicationProgress",
        "replicationLocation",
        "cname",
        "bucketInfo",
        "comp",
        "qos",
        "live",
        "status",
        "vod",
        "startTime",
        "endTime",
        "symlink",
        "x-oss-process",
        "response-content-type",
        "response-content-language",
        "response-expires",
        "response-cache-control",
        "response-content-disposition",
        "response-content-encoding",
        "udf",
        "udfName",
        "udfImage",
        "udfId",
        "udfImageDesc",
        "udfApplication",
        "udfApplicationLog",
        "restore",
        "callback",
        "callback-var",
        "continuation-token",
    ]
)

Params = Mapping[str, Optional[str]]


def _resource_path(bucket: str, object: str) -> str:
    if not bucket:
        return f"/{object}"
    return f"/{bucket}/{object}"


def render_params(items: Iterable[Tuple[str, Optional[str]]]) -> str:
    """渲染为 key=value&key2, 值为 None 时只保留 key, 不做转义"""
    return "&".join(key if value is None else f"{key}={value}" for key, value in items)


def resolve_subresources(params: Params, subresources: FrozenSet[str] = OSS_SUBRESOURCES) -> str:
    selected = sorted((k, v) for k, v in params.items() if k in subresources)
    if not selected:
        return ""
    return "?" + render_params(selected)


def resolve_resource(
    bucket: str,
    object: str,
    params: Params,
    subresources: FrozenSet[str] = OSS_SUBRESOURCES,
) -> str:
    return _resource_path(bucket, object) + resolve_subresources(params, subresources)


def resolve_presign_resource(bucket: str, object: str, raw_subresource: str = "") -> str:
    resource = _resource_path(bucket, object)
    if raw_subresource:
        resource += "?" + raw_subresource
    return resource
