import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from awos.adapters.types import StorageProfile

load_dotenv(dotenv_path=".env")

VERSION = "0.1.0"

# 环境变量 -> StorageProfile.config 字段
PROFILE_ENV_KEYS: Dict[str, str] = {
    "AWOS_ENDPOINT": "endpoint",
    "AWOS_BUCKET": "bucket",
    "AWOS_ACCESS_KEY_ID": "access_key_id",
    "AWOS_ACCESS_KEY_SECRET": "access_key_secret",
    "AWOS_REGION": "region",
    "AWOS_SCHEMA": "schema",
    "AWOS_TIMEOUT": "timeout",
    "AWOS_PATH_STYLE": "path_style",
}


class ConfigService:
    _cache: Dict[str, Any] = {}

    @classmethod
    def get(cls, key: str, default: Optional[Any] = None) -> Any:
        if key in cls._cache:
            return cls._cache[key]
        env_value = os.getenv(key)
        if env_value is not None:
            cls._cache[key] = env_value
            return env_value
        return default

    @classmethod
    def set(cls, key: str, value: Any):
        """仅在当前进程内覆盖配置 (如命令行参数)"""
        cls._cache[key] = value

    @classmethod
    def clear_cache(cls):
        cls._cache.clear()

    @classmethod
    def load_profile(cls) -> StorageProfile:
        backend = cls.get("AWOS_BACKEND", "oss")
        config: Dict[str, Any] = {}
        for env_key, field in PROFILE_ENV_KEYS.items():
            value = cls.get(env_key)
            if value not in (None, ""):
                config[field] = value
        return StorageProfile(type=backend, config=config)
