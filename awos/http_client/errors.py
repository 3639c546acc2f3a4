from __future__ import annotations

import xml.etree.ElementTree as ET
from http import HTTPStatus
from typing import Dict, Optional


class AwosError(Exception):
    """awos 所有错误的基类"""

    pass


class ConstructionError(AwosError):
    """请求构造阶段的错误, 在发出网络请求之前抛出"""

    pass


class DispatchError(AwosError):
    """请求分发失败"""

    pass


class InvalidMethodError(DispatchError, ConstructionError):
    def __init__(self, method: object):
        self.method = method
        super().__init__(f"Invalid HTTP method: {method!r}")


class HeaderError(DispatchError, ConstructionError):
    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"Invalid header {key!r}: {reason}")


class TransportError(DispatchError):
    """网络/连接层错误, 保留底层 transport 的错误信息"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DecodingError(AwosError):
    """响应内容无法按要求解码 (非 UTF-8 文本, 列表 XML 格式错误)"""

    pass


def _xml_child_text(root: ET.Element, name: str) -> Optional[str]:
    for child in root:
        if child.tag.rsplit("}", 1)[-1] == name:
            return child.text
    return None


class ServiceError(AwosError):
    """存储服务返回了非 2xx 状态码"""

    def __init__(self, status_code: int, body: bytes = b"", headers: Optional[Dict[str, str]] = None):
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}
        self.code: Optional[str] = None
        self.message: Optional[str] = None
        self.request_id: Optional[str] = None
        self._parse_error_body()
        detail = f"{status_code} {self.reason}"
        if self.code:
            detail += f" ({self.code}: {self.message or ''})"
        super().__init__(detail)

    def _parse_error_body(self) -> None:
        if not self.body:
            return
        try:
            root = ET.fromstring(self.body)
        except ET.ParseError:
            return
        if root.tag.rsplit("}", 1)[-1] != "Error":
            return
        self.code = _xml_child_text(root, "Code")
        self.message = _xml_child_text(root, "Message")
        self.request_id = _xml_child_text(root, "RequestId")

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status_code).phrase
        except ValueError:
            return "Unknown Status"

    @property
    def is_bad_request(self) -> bool:
        return self.status_code == 400

    @property
    def is_forbidden(self) -> bool:
        return self.status_code == 403

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_rate_limited(self) -> bool:
        # S3 兼容服务用 503 SlowDown 表示限流
        if self.status_code == 503:
            return self.code == "SlowDown"
        return self.status_code == 429

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    def to_dict(self) -> Dict[str, object]:
        return {
            "status_code": self.status_code,
            "reason": self.reason,
            "code": self.code,
            "message": self.message,
            "request_id": self.request_id,
        }
