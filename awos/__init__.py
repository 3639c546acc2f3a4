from .adapters.types import (
    GetAsBufferResp,
    GetResp,
    ListDetailsResp,
    ListOptions,
    ObjectDetails,
    PutOrCopyOptions,
    SignUrlOptions,
    StorageProfile,
)
from .client import AwosClient
from .config import VERSION
from .http_client import (
    AwosError,
    ConstructionError,
    DecodingError,
    DispatchError,
    HeaderError,
    InvalidMethodError,
    ServiceError,
    TransportError,
)
from .regions import Region

__version__ = VERSION

__all__ = [
    "AwosClient",
    "AwosError",
    "ConstructionError",
    "DecodingError",
    "DispatchError",
    "GetAsBufferResp",
    "GetResp",
    "HeaderError",
    "InvalidMethodError",
    "ListDetailsResp",
    "ListOptions",
    "ObjectDetails",
    "PutOrCopyOptions",
    "Region",
    "ServiceError",
    "SignUrlOptions",
    "StorageProfile",
    "TransportError",
]
