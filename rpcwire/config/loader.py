"""Reading and writing the JSON config file (camelCase on disk, snake_case in Config)."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from rpcwire.config.schema import Config

# Children of these keys are HTTP header names and keep their spelling.
_VERBATIM_KEYS = frozenset({"headers"})

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def get_config_path() -> Path:
    """Default config file location."""
    return Path.home() / ".rpcwire" / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from ``config_path`` (default location when omitted).

    A missing file yields ``Config()``, which still honours ``RPCWIRE_*`` variables.

    Raises:
        ValueError: the file is not JSON, not an object, or fails validation.
    """
    path = config_path or get_config_path()
    if not path.exists():
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return Config.model_validate(convert_keys(data))
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        raise ValueError(
            f"Failed to load config from {path}: {e}. "
            "Fix the file or remove it to regenerate defaults."
        ) from e


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """Write ``config`` as camelCase JSON and drop the cached copy for that path."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(convert_to_camel(config.model_dump()), indent=2) + "\n", encoding="utf-8")

    from rpcwire.config.access import clear_config_cache

    clear_config_cache(config_path=path)
    return path


def _rename_keys(data: Any, rename: Callable[[str], str]) -> Any:
    if isinstance(data, list):
        return [_rename_keys(item, rename) for item in data]
    if not isinstance(data, dict):
        return data
    renamed: dict[str, Any] = {}
    for key, value in data.items():
        new_key = rename(key)
        if new_key in _VERBATIM_KEYS and isinstance(value, dict):
            renamed[new_key] = dict(value)
        else:
            renamed[new_key] = _rename_keys(value, rename)
    return renamed


def convert_keys(data: Any) -> Any:
    """camelCase keys → snake_case, header names untouched."""
    return _rename_keys(data, camel_to_snake)


def convert_to_camel(data: Any) -> Any:
    """snake_case keys → camelCase, header names untouched."""
    return _rename_keys(data, snake_to_camel)


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)
