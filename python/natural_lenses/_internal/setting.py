from __future__ import annotations

import contextlib
import dataclasses
import os
import threading
from typing import Any, Iterator

_ENV_PREFIX = "NATURAL_LENSES_"
_TRUE_VALUES = frozenset(("1", "true", "yes", "on"))
_FALSE_VALUES = frozenset(("0", "false", "no", "off", ""))


def _bool_from_env(name: str, default: bool) -> bool:
    raw = os.getenv(_ENV_PREFIX + name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {_ENV_PREFIX + name}: {raw!r}")


@dataclasses.dataclass
class Settings:
    """
    Process-wide behavior switches.

    Attributes:
        strict_presence: When False (the default, compatible behavior), an
            `OpticArray` treats an empty container produced by an
            intermediate stage as a missing slot. When True, only a missing
            slot counts as missing.
        log_stack_info: Attach the current stack to warnings logged for
            recoverable anomalies, e.g. a non-iterable result from the
            transform passed to ``xform_iterable_in_clone``.
    """

    strict_presence: bool = False
    log_stack_info: bool = True

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """
        Build settings from ``NATURAL_LENSES_*`` environment variables, with
        keyword arguments taking precedence.
        """
        values: dict[str, Any] = {
            "strict_presence": _bool_from_env("STRICT_PRESENCE", False),
            "log_stack_info": _bool_from_env("LOG_STACK_INFO", True),
        }
        values.update(overrides)
        return cls(**values)


_settings_lock: threading.Lock = threading.Lock()
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the process settings, reading the environment on first use.
    """
    global _settings  # pylint: disable=global-statement
    settings = _settings
    if settings is not None:
        return settings
    with _settings_lock:
        if _settings is None:
            _settings = Settings.from_env()
        return _settings


def set_settings(settings: Settings | None) -> Settings | None:
    """
    Replace the process settings and return the previous ones. Passing None
    makes the next `get_settings()` re-read the environment.
    """
    global _settings  # pylint: disable=global-statement
    with _settings_lock:
        previous = _settings
        _settings = settings
    return previous


@contextlib.contextmanager
def settings_override(**changes: Any) -> Iterator[Settings]:
    """
    Temporarily run with some settings changed.
    """
    previous = set_settings(dataclasses.replace(get_settings(), **changes))
    try:
        yield get_settings()
    finally:
        set_settings(previous)
