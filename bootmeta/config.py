"""TOML-based retry and provider configuration.

Loads /etc/bootmeta/config.toml, where a global ``[retry]`` table sets the
Retry Client defaults and ``[providers.<name>]`` tables override them per
provider (plus the provider's ``endpoint``):

    [retry]
    max_attempts = 20

    [providers.gce]
    endpoint = "http://10.0.0.2/computeMetadata/v1/"
    max_backoff = 2.0
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeAlias

RawConfig: TypeAlias = dict[str, Any]

DEFAULT_CONFIG_PATH = Path("/etc/bootmeta/config.toml")


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Retry Client configuration.

    Args:
        initial_backoff: Delay in seconds before the first retry.
        max_backoff: Upper clamp for the doubling delay.
        max_attempts: Total attempts, including the first one.
        timeout: Per-request transport timeout in seconds.
    """

    initial_backoff: float = 1.0
    max_backoff: float = 5.0
    max_attempts: int = 10
    timeout: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")
        if self.initial_backoff < 0 or self.timeout < 0:
            raise ValueError("initial_backoff and timeout must be non-negative")
        if self.max_backoff < self.initial_backoff:
            raise ValueError(
                f"max_backoff ({self.max_backoff}) is lower than "
                f"initial_backoff ({self.initial_backoff})"
            )


_RETRY_FIELDS = frozenset(f.name for f in fields(RetryConfig))


def _deep_merge(base: RawConfig, override: RawConfig) -> RawConfig:
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_toml(path: Path) -> RawConfig:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def load_config(path: Path | None = None) -> RawConfig:
    config = _read_toml(path or DEFAULT_CONFIG_PATH)
    config.setdefault("retry", {})
    config.setdefault("providers", {})
    return config


def provider_section(name: str, config: RawConfig) -> RawConfig:
    """Return the effective settings for provider ``name``.

    The provider table is merged over the global ``[retry]`` table, so the
    result holds every retry field that is set anywhere plus the provider's
    own keys (``endpoint``).
    """
    return _deep_merge(config.get("retry", {}), config.get("providers", {}).get(name, {}))


def retry_config(section: RawConfig) -> RetryConfig:
    unknown = set(section) - _RETRY_FIELDS - {"endpoint"}
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
    return RetryConfig(**{k: v for k, v in section.items() if k in _RETRY_FIELDS})
