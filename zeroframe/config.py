from __future__ import annotations

import dataclasses
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from zeroframe.protocol.constants import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_RECONNECT_DELAY

logger = logging.getLogger(__name__)

ENV_PREFIX = "ZEROFRAME"


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


@dataclass
class MultiuserOptions:
    master_address: Optional[str] = None
    master_seed: Optional[str] = None  # reserved


@dataclass
class InstanceOptions:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    secure: bool = False


@dataclass
class ShowOptions:
    log: bool = False
    error: bool = False


@dataclass
class ReconnectOptions:
    """Retry policy: attempts 0 disables reconnecting, -1 retries forever."""

    attempts: int = -1
    delay: int = DEFAULT_RECONNECT_DELAY  # milliseconds
    reset_on_open: bool = True

    @property
    def delay_seconds(self) -> float:
        return self.delay / 1000


@dataclass
class ClientOptions:
    """Complete client options; every section has defaults."""

    multiuser: MultiuserOptions = field(default_factory=MultiuserOptions)
    instance: InstanceOptions = field(default_factory=InstanceOptions)
    show: ShowOptions = field(default_factory=ShowOptions)
    reconnect: ReconnectOptions = field(default_factory=ReconnectOptions)

    @classmethod
    def from_mapping(cls, overrides: Optional[Mapping[str, Any]] = None) -> "ClientOptions":
        """Build options from defaults deep-merged with a nested mapping of overrides."""
        return cls().merged(overrides)

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "ClientOptions":
        sections: Dict[str, Any] = {}
        for section_name, values in (overrides or {}).items():
            name = _snake(section_name)
            if name not in _SECTIONS:
                raise ConfigError(f"Unknown option section '{section_name}'")
            if not isinstance(values, Mapping):
                raise ConfigError(f"Option section '{section_name}' must be a mapping")
            sections[name] = _merge_section(getattr(self, name), values)

        options = dataclasses.replace(self, **sections)
        _validate_options(options)
        return options


_SECTIONS = {f.name for f in dataclasses.fields(ClientOptions)}


def _snake(key: str) -> str:
    """Accept camelCase option names (masterAddress) as well as snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def _merge_section(current: Any, values: Mapping[str, Any]) -> Any:
    known = {f.name for f in dataclasses.fields(current)}
    changes: Dict[str, Any] = {}
    for key, value in values.items():
        name = _snake(key)
        if name not in known:
            raise ConfigError(f"Unknown option '{key}' in section {type(current).__name__}")
        changes[name] = _coerce_type(value, getattr(type(current)(), name))
    return dataclasses.replace(current, **changes)


def _coerce_type(value: Any, default: Any) -> Any:
    if default is None:
        # Optional string fields
        return None if value in (None, "") else str(value)
    target_type = type(default)
    if isinstance(value, target_type) and not (target_type is int and isinstance(value, bool)):
        return value
    try:
        if target_type is bool:
            return str(value).lower() in ("1", "true", "yes", "on")
        return target_type(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Cannot convert {value!r} to {target_type.__name__}") from exc


def _validate_options(options: ClientOptions) -> None:
    if not options.instance.host:
        raise ConfigError("instance.host must not be empty")
    if not (1 <= options.instance.port <= 65535):
        raise ConfigError("instance.port must be between 1 and 65535")
    if options.reconnect.attempts < -1:
        raise ConfigError("reconnect.attempts must be -1 (unlimited), 0 (disabled) or positive")
    if options.reconnect.delay < 0:
        raise ConfigError("reconnect.delay must not be negative")


def load_options(env_path: str = ".env", overrides: Optional[Mapping[str, Any]] = None) -> ClientOptions:
    """Load client options from env file/environment variables, then apply explicit overrides."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    from_env: Dict[str, Dict[str, Any]] = {}
    for section in dataclasses.fields(ClientOptions):
        section_cls = section.default_factory  # type: ignore[misc]
        for option in dataclasses.fields(section_cls):
            env_key = f"{ENV_PREFIX}_{section.name}_{option.name}".upper()
            value = os.getenv(env_key)
            if value is not None:
                from_env.setdefault(section.name, {})[option.name] = value

    options = ClientOptions.from_mapping(from_env).merged(overrides)
    logger.debug("Loaded options: %s", options)
    return options


__all__ = [
    "ClientOptions",
    "ConfigError",
    "InstanceOptions",
    "MultiuserOptions",
    "ReconnectOptions",
    "ShowOptions",
    "load_options",
]
