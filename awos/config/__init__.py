from .service import PROFILE_ENV_KEYS, VERSION, ConfigService

__all__ = [
    "ConfigService",
    "PROFILE_ENV_KEYS",
    "VERSION",
]
