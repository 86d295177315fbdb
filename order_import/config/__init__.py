from .loader import ApiConfig, ConfigError, ImportConfig, load_config

__all__ = [
    "ApiConfig",
    "ConfigError",
    "ImportConfig",
    "load_config",
]
