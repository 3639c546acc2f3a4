from .registry import create_adapter, get_config_schema, get_config_schemas, validate_config
from .types import (
    GetAsBufferResp,
    GetResp,
    ListDetailsResp,
    ListOptions,
    ObjectDetails,
    PutOrCopyOptions,
    SignUrlOptions,
    StorageProfile,
)

__all__ = [
    "GetAsBufferResp",
    "GetResp",
    "ListDetailsResp",
    "ListOptions",
    "ObjectDetails",
    "PutOrCopyOptions",
    "SignUrlOptions",
    "StorageProfile",
    "create_adapter",
    "get_config_schema",
    "get_config_schemas",
    "validate_config",
]
