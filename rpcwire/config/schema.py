"""Configuration schema using Pydantic.

Persisted as camelCase JSON at ~/.rpcwire/config.json; every field can also be set
from the environment, e.g. ``RPCWIRE_CLIENT__ENDPOINT``.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class ClientConfig(BaseModel):
    """XML-RPC endpoint and HTTP settings."""
    endpoint: str = "http://127.0.0.1:8000/RPC2"
    timeout_seconds: float = Field(default=30.0, gt=0)
    headers: dict[str, str] = Field(default_factory=dict)  # Extra HTTP headers, names kept verbatim
    user_agent: str = "rpcwire"
    verify_tls: bool = True


class LoggingConfig(BaseModel):
    """Loguru sinks used by the CLI."""
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: str | None = None  # Rotating log file; stderr only when unset


class Config(BaseSettings):
    """Root configuration for rpcwire."""
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(
        env_prefix="RPCWIRE_",
        env_nested_delimiter="__"
    )
