from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict

from .errors import DecodingError, InvalidMethodError


class Method(str, Enum):
    GET = "GET"
    PUT = "PUT"
    HEAD = "HEAD"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: "Method | str") -> "Method":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidMethodError(value) from None


class Schema(str, Enum):
    HTTP = "http"
    HTTPS = "https"

    @classmethod
    def parse(cls, value: "Schema | str | None") -> "Schema":
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        if normalized == "https":
            return cls.HTTPS
        return cls.HTTP

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Credentials:
    access_key_id: str
    access_key_secret: str = field(repr=False)


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    def text(self) -> str:
        try:
            return self.body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodingError(f"Response body is not valid UTF-8: {exc}") from exc
