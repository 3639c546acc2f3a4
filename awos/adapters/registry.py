import logging
import pkgutil
from importlib import import_module
from typing import Any, Callable, Dict, List, Optional

import httpx

from awos.adapters.providers.base import BaseAdapter
from awos.adapters.types import StorageProfile

logger = logging.getLogger(__name__)

AdapterFactory = Callable[..., BaseAdapter]

TYPE_MAP: Dict[str, AdapterFactory] = {}
CONFIG_SCHEMAS: Dict[str, List[Dict[str, Any]]] = {}


def normalize_adapter_type(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().lower()
    return normalized or None


def discover_adapters():
    """扫描 awos.adapters.providers 包, 自动注册适配器类型、工厂与配置 schema。"""
    from awos.adapters import providers as adapters_pkg

    TYPE_MAP.clear()
    CONFIG_SCHEMAS.clear()
    for modinfo in pkgutil.iter_modules(adapters_pkg.__path__):
        if modinfo.name.startswith("_"):
            continue
        full_name = f"{adapters_pkg.__name__}.{modinfo.name}"
        try:
            module = import_module(full_name)
        except Exception:
            logger.warning("Failed to import adapter module %s", full_name, exc_info=True)
            continue

        adapter_type = normalize_adapter_type(getattr(module, "ADAPTER_TYPE", None))
        schema = getattr(module, "CONFIG_SCHEMA", None)
        factory = getattr(module, "ADAPTER_FACTORY", None)
        if not adapter_type or not callable(factory):
            continue

        TYPE_MAP[adapter_type] = factory
        if isinstance(schema, list):
            CONFIG_SCHEMAS[adapter_type] = schema
    logger.debug("Discovered adapters: %s", sorted(TYPE_MAP))


def get_config_schemas() -> Dict[str, List[Dict[str, Any]]]:
    return CONFIG_SCHEMAS


def get_config_schema(adapter_type: str):
    return CONFIG_SCHEMAS.get(normalize_adapter_type(adapter_type) or "")


def validate_config(adapter_type: str, cfg: Any) -> Dict[str, Any]:
    """按 CONFIG_SCHEMA 校验配置, 补全默认值并丢弃未声明的字段"""
    normalized = normalize_adapter_type(adapter_type)
    if not normalized:
        raise ValueError("Unsupported adapter type")
    if not isinstance(cfg, dict):
        raise ValueError("config must be a mapping")
    schema = CONFIG_SCHEMAS.get(normalized)
    if not schema:
        raise ValueError(f"Unsupported adapter type: {normalized}")
    out = {}
    missing = []
    for f in schema:
        k = f["key"]
        if k in cfg and cfg[k] not in (None, ""):
            out[k] = cfg[k]
        elif "default" in f:
            out[k] = f["default"]
        elif f.get("required"):
            missing.append(k)
    if missing:
        raise ValueError("Missing required config fields: " + ", ".join(missing))
    return out


def create_adapter(profile: StorageProfile, client: Optional[httpx.AsyncClient] = None) -> BaseAdapter:
    adapter_type = normalize_adapter_type(profile.type) or ""
    factory = TYPE_MAP.get(adapter_type)
    if factory is None:
        discover_adapters()
        factory = TYPE_MAP.get(adapter_type)
        if factory is None:
            raise ValueError(f"Unsupported adapter type: {profile.type}")
    config = validate_config(adapter_type, profile.config or {})
    return factory(StorageProfile(type=adapter_type, config=config), client=client)


discover_adapters()
