"""Configuration module for rpcwire."""

from rpcwire.config.loader import load_config, get_config_path, save_config
from rpcwire.config.schema import ClientConfig, Config, LoggingConfig
from rpcwire.config.access import get_config, clear_config_cache

__all__ = [
    "ClientConfig",
    "Config",
    "LoggingConfig",
    "load_config",
    "save_config",
    "get_config_path",
    "get_config",
    "clear_config_cache",
]
