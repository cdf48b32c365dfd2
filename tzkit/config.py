"""
tzkit configuration: RPC endpoint, HTTP behavior and confirmation polling.

- :class:`PollingConfig` is the per-context polling record consulted by the
  confirmation tracker.
- :class:`ToolkitConfig` bundles everything the facade and the CLI need and
  can be loaded from ``TZKIT_*`` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Optional, TypeVar

from .errors import ConfigError

__all__ = ["PollingConfig", "ToolkitConfig", "DEFAULT_RPC_URL"]

DEFAULT_RPC_URL = "http://127.0.0.1:8732"

T = TypeVar("T")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None and v != "" else default


def _parse(name: str, raw: Optional[str], cast: Callable[[str], T], default: T) -> T:
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigError(f"invalid value {raw!r}", key=name) from exc


def _ensure_scheme(url: str, allowed: tuple[str, ...] = ("http", "https")) -> str:
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ConfigError(f"URL must start with {allowed}, got: {url!r}", key="rpc_url")
    return url.rstrip("/")


@dataclass(slots=True)
class PollingConfig:
    """Confirmation polling defaults, in seconds."""

    confirmation_polling_interval: float = 10.0
    default_confirmation_count: int = 0
    confirmation_polling_timeout: float = 180.0

    def with_overrides(self, **overrides: Any) -> "PollingConfig":
        known = {k: v for k, v in overrides.items() if k in self.to_dict() and v is not None}
        return replace(self, **known)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class ToolkitConfig:
    # Node
    rpc_url: str = DEFAULT_RPC_URL
    chain: str = "main"
    # HTTP behavior
    request_timeout: float = 30.0
    max_retries: int = 0
    backoff_base: float = 0.15
    backoff_factor: float = 1.8
    # Polling
    polling: PollingConfig = field(default_factory=PollingConfig)
    stream_poll_interval: float = 20.0
    # Misc
    protocol: Optional[str] = None
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, prefix: str = "TZKIT_") -> "ToolkitConfig":
        """
        Create config from environment variables:

        TZKIT_RPC_URL                  (http/https)
        TZKIT_CHAIN                    (chain alias or id, default "main")
        TZKIT_TIMEOUT                  (float seconds, HTTP)
        TZKIT_MAX_RETRIES              (int, GET requests only)
        TZKIT_CONFIRMATION_INTERVAL    (float seconds)
        TZKIT_CONFIRMATION_TIMEOUT     (float seconds)
        TZKIT_CONFIRMATION_COUNT       (int)
        TZKIT_STREAM_INTERVAL          (float seconds)
        TZKIT_PROTOCOL                 (protocol hash hint)
        TZKIT_LOG_LEVEL                (logging level name)
        """

        def get(key: str) -> Optional[str]:
            return _env(f"{prefix}{key}")

        polling = PollingConfig(
            confirmation_polling_interval=_parse(
                f"{prefix}CONFIRMATION_INTERVAL", get("CONFIRMATION_INTERVAL"), float, 10.0
            ),
            default_confirmation_count=_parse(
                f"{prefix}CONFIRMATION_COUNT", get("CONFIRMATION_COUNT"), int, 0
            ),
            confirmation_polling_timeout=_parse(
                f"{prefix}CONFIRMATION_TIMEOUT", get("CONFIRMATION_TIMEOUT"), float, 180.0
            ),
        )
        return cls(
            rpc_url=_ensure_scheme(get("RPC_URL") or DEFAULT_RPC_URL),
            chain=get("CHAIN") or "main",
            request_timeout=_parse(f"{prefix}TIMEOUT", get("TIMEOUT"), float, 30.0),
            max_retries=_parse(f"{prefix}MAX_RETRIES", get("MAX_RETRIES"), int, 0),
            polling=polling,
            stream_poll_interval=_parse(
                f"{prefix}STREAM_INTERVAL", get("STREAM_INTERVAL"), float, 20.0
            ),
            protocol=get("PROTOCOL"),
            log_level=(get("LOG_LEVEL") or "WARNING").upper(),
        )

    def with_overrides(self, **overrides: Any) -> "ToolkitConfig":
        """
        Copy with keyword overrides. ``None`` values and unknown keys are
        ignored; polling keys are routed to the nested :class:`PollingConfig`.
        """
        top = {k: v for k, v in overrides.items() if k in self.to_dict() and k != "polling"}
        top = {k: v for k, v in top.items() if v is not None}
        if "rpc_url" in top:
            top["rpc_url"] = _ensure_scheme(top["rpc_url"])
        polling = overrides.get("polling")
        if not isinstance(polling, PollingConfig):
            polling = self.polling.with_overrides(**overrides)
        return replace(self, polling=polling, **top)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
