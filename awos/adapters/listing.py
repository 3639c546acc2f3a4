import xml.etree.ElementTree as ET
from typing import Optional

from awos.http_client import DecodingError

from .types import ListDetailsResp, ObjectDetails


def _local(tag: str) -> str:
    # S3 的响应带命名空间 {http://s3.amazonaws.com/doc/2006-03-01/}
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def _text(elem: ET.Element, name: str) -> str:
    child = _child(elem, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def parse_list_objects(body: bytes) -> ListDetailsResp:
    """解析 ListBucketResult (OSS / S3 ListObjects)"""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as exc:
        raise DecodingError(f"Malformed listing XML: {exc}") from exc
    if _local(root.tag) != "ListBucketResult":
        raise DecodingError(f"Unexpected listing root element: {_local(root.tag)}")

    objects = []
    common_prefixes = []
    for child in root:
        name = _local(child.tag)
        if name == "Contents":
            objects.append(
                ObjectDetails(
                    key=_text(child, "Key"),
                    last_modified=_text(child, "LastModified"),
                    e_tag=_text(child, "ETag"),
                    size=_text(child, "Size"),
                )
            )
        elif name == "CommonPrefixes":
            prefix = _text(child, "Prefix")
            if prefix:
                common_prefixes.append(prefix)

    is_truncated = _text(root, "IsTruncated").lower() == "true"
    next_marker = _text(root, "NextMarker") or _text(root, "NextContinuationToken")
    # S3 v1 不带 delimiter 时不返回 NextMarker, 以最后一个 key 续翻
    if is_truncated and not next_marker and objects:
        next_marker = objects[-1].key
    return ListDetailsResp(
        is_truncated=is_truncated,
        objects=objects,
        prefix=_text(root, "Prefix"),
        next_marker=next_marker,
        common_prefixes=common_prefixes,
    )
