"""Client configuration loaded from TOML and environment overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .net import DEFAULT_TIMEOUT

__all__ = [
    "ClientConfig",
    "ConfigError",
    "DEFAULT_BASE_URL",
    "ENV_TIMEOUT",
    "ENV_URL",
    "load_config",
]

DEFAULT_BASE_URL = "http://localhost:3000"
ENV_URL = "FORGE_URL"
ENV_TIMEOUT = "FORGE_TIMEOUT"


class ConfigError(ValueError):
    """Raised when the configuration file or environment is malformed."""


@dataclass
class ClientConfig:
    """Connection settings for a Forge server."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


def _coerce_timeout(value: Any, dotted_key: str) -> float:
    """Return a positive timeout in seconds, accepting numeric strings."""

    if isinstance(value, bool):
        raise ConfigError(f"{dotted_key} must be a number of seconds.")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError as exc:
            raise ConfigError(f"{dotted_key} must be a number of seconds.") from exc
    if not isinstance(value, (int, float)):
        raise ConfigError(f"{dotted_key} must be a number of seconds.")
    if value <= 0:
        raise ConfigError(f"{dotted_key} must be greater than zero.")
    return float(value)


def _sanitize_client_section(raw: Any, name: str) -> ClientConfig:
    """
    Coerce a raw TOML table into a :class:`ClientConfig`.

    Raises:
        ConfigError: If the section is not a table or contains invalid keys or values.
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    known = {field.name for field in fields(ClientConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Invalid keys in [{name}]: {', '.join(unknown)}")
    cleaned: Dict[str, Any] = {}
    if "base_url" in raw:
        base_url = raw["base_url"]
        if not isinstance(base_url, str) or not base_url.strip():
            raise ConfigError(f"{name}.base_url must be a non-empty string.")
        cleaned["base_url"] = base_url.strip()
    if "timeout" in raw:
        cleaned["timeout"] = _coerce_timeout(raw["timeout"], f"{name}.timeout")
    return ClientConfig(**cleaned)


def _apply_env(cfg: ClientConfig, env: Mapping[str, str]) -> ClientConfig:
    url = env.get(ENV_URL, "").strip()
    if url:
        cfg.base_url = url
    timeout = env.get(ENV_TIMEOUT, "").strip()
    if timeout:
        cfg.timeout = _coerce_timeout(timeout, ENV_TIMEOUT)
    return cfg


def load_config(
    path: Optional[Union[str, Path]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """
    Load client settings.

    Parameters:
        path (str | Path | None): Optional TOML file with a ``[client]`` table.
            A missing file is an error; ``None`` skips the file entirely.
        env (Mapping[str, str] | None): Environment used for ``FORGE_URL`` and
            ``FORGE_TIMEOUT`` overrides; defaults to ``os.environ``.

    Returns:
        ClientConfig: Defaults, overlaid by the file, overlaid by the environment.

    Raises:
        ConfigError: If the file cannot be read or parsed, or a value is invalid.
    """

    cfg = ClientConfig()
    if path is not None:
        config_path = Path(path)
        try:
            with config_path.open("rb") as handle:
                raw = tomllib.load(handle)
        except FileNotFoundError as exc:
            raise ConfigError(f"Config file not found: {config_path}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Failed to parse {config_path}: {exc}") from exc
        if "client" in raw:
            cfg = _sanitize_client_section(raw["client"], "client")
    return _apply_env(cfg, os.environ if env is None else env)
