from .auth import (
    OSS_HEADER_PREFIX,
    S3_HEADER_PREFIX,
    S3_META_PREFIX,
    OssSigner,
    S3Signer,
    SignatureContext,
    SigningStrategy,
    get_signer,
    http_date,
)
from .dispatch import Dispatcher
from .errors import (
    AwosError,
    ConstructionError,
    DecodingError,
    DispatchError,
    HeaderError,
    InvalidMethodError,
    ServiceError,
    TransportError,
)
from .requests import OSS_META_PREFIX, SignableRequest
from .resources import OSS_SUBRESOURCES, resolve_presign_resource, resolve_resource
from .types import Credentials, HttpResponse, Method, Schema

__all__ = [
    "OSS_HEADER_PREFIX",
    "OSS_META_PREFIX",
    "OSS_SUBRESOURCES",
    "S3_HEADER_PREFIX",
    "S3_META_PREFIX",
    "AwosError",
    "ConstructionError",
    "Credentials",
    "DecodingError",
    "DispatchError",
    "Dispatcher",
    "HeaderError",
    "HttpResponse",
    "InvalidMethodError",
    "Method",
    "OssSigner",
    "S3Signer",
    "Schema",
    "ServiceError",
    "SignableRequest",
    "SignatureContext",
    "SigningStrategy",
    "TransportError",
    "get_signer",
    "http_date",
    "resolve_presign_resource",
    "resolve_resource",
]
