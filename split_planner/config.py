"""Environment driven settings for Split Planner."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence, TypeVar

from .history import DEFAULT_HISTORY_LIMIT
from .orchestrator import DEFAULT_TICK_INTERVAL

LOGGER = logging.getLogger("split_planner.config")

T = TypeVar("T")

_API_KEY_ENV_VARS = ("SPLIT_PLANNER_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY")
_MODEL_ENV_VARS = ("SPLIT_PLANNER_GEMINI_MODEL",)
_TIMEOUT_ENV_VARS = ("SPLIT_PLANNER_ORACLE_TIMEOUT",)
_TICK_ENV_VARS = ("SPLIT_PLANNER_TICK_INTERVAL",)
_HISTORY_ENV_VARS = ("SPLIT_PLANNER_HISTORY_LIMIT",)

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_ORACLE_TIMEOUT = 60.0


def _first_env(names: Sequence[str], environ: Mapping[str, str]) -> Optional[str]:
    for env_name in names:
        value = environ.get(env_name)
        if value is not None and value.strip():
            return value.strip()
    return None


def _parse(
    names: Sequence[str],
    environ: Mapping[str, str],
    convert: Callable[[str], T],
    default: T,
    minimum: T,
) -> T:
    raw = _first_env(names, environ)
    if raw is None:
        return default
    try:
        value = convert(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid value %r for %s", raw, names[0])
        return default
    if value < minimum:  # type: ignore[operator]
        LOGGER.warning("Ignoring out of range value %r for %s", raw, names[0])
        return default
    return value


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration.

    Attributes:
        gemini_api_key: API key for the Gemini suggestion oracle
        gemini_model: Gemini model used for suggestions
        oracle_timeout: Oracle request timeout in seconds
        tick_interval: Seconds between processing clock ticks
        history_limit: Maximum number of retained plan snapshots
    """
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_MODEL
    oracle_timeout: float = DEFAULT_ORACLE_TIMEOUT
    tick_interval: float = DEFAULT_TICK_INTERVAL
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        return cls(
            gemini_api_key=_first_env(_API_KEY_ENV_VARS, environ),
            gemini_model=_first_env(_MODEL_ENV_VARS, environ) or DEFAULT_MODEL,
            oracle_timeout=_parse(_TIMEOUT_ENV_VARS, environ, float, DEFAULT_ORACLE_TIMEOUT, 0.0),
            tick_interval=_parse(_TICK_ENV_VARS, environ, float, DEFAULT_TICK_INTERVAL, 0.0),
            history_limit=_parse(_HISTORY_ENV_VARS, environ, int, DEFAULT_HISTORY_LIMIT, 1),
        )


__all__ = ["Settings", "DEFAULT_MODEL"]
