# =============================================================================
# Logging Configuration - Per-Invocation Level and Trace Prefix
# =============================================================================
# A request may raise or lower the log level for itself via a query string
# parameter, and may tag every log line with a trace prefix. Each invocation
# starts from the baseline level so overrides never leak across warm
# invocations.
# =============================================================================

import logging
import os
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

VALID_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class LoggerConfig:
    """
    Attributes:
        env_param_log_level_name: Env variable holding the default level
        query_param_log_level_name: Query parameter that overrides the level
            for one request (None disables the override)
        query_param_trace_prefix_name: Query parameter whose value prefixes
            every log message of the request (None disables it)
    """
    env_param_log_level_name: str = "LOG_LEVEL"
    query_param_log_level_name: Optional[str] = None
    query_param_trace_prefix_name: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LoggerConfig":
        return cls(
            env_param_log_level_name=os.environ.get("LOG_LEVEL_ENV_PARAM", "LOG_LEVEL"),
            query_param_log_level_name=os.environ.get("LOG_LEVEL_QUERY_PARAM") or None,
            query_param_trace_prefix_name=os.environ.get("TRACE_PREFIX_QUERY_PARAM") or None,
        )


def _normalize(level: Any) -> Optional[str]:
    if not isinstance(level, str):
        return None
    name = level.strip().upper()
    if name == "WARN":
        name = "WARNING"
    return name if name in VALID_LEVELS else None


def _query_params(event: Any) -> Dict[str, Any]:
    if not isinstance(event, dict):
        return {}
    return event.get("queryStringParameters") or {}


def calc_log_level(baseline: Union[int, str], event: Any, config: Optional[LoggerConfig]) -> Union[int, str]:
    """
    Level for this invocation: query parameter, then env variable, then baseline.

    Unknown level names are ignored.
    """
    if config is None:
        return baseline

    if config.query_param_log_level_name:
        requested = _normalize(_query_params(event).get(config.query_param_log_level_name))
        if requested:
            return requested

    from_env = _normalize(os.environ.get(config.env_param_log_level_name))
    return from_env or baseline


def calc_trace_prefix(event: Any, config: Optional[LoggerConfig]) -> Optional[str]:
    if config is None or not config.query_param_trace_prefix_name:
        return None
    prefix = _query_params(event).get(config.query_param_trace_prefix_name)
    return str(prefix) if prefix else None


_trace_prefix: ContextVar[Optional[str]] = ContextVar("trace_prefix", default=None)


class TracePrefixFilter(logging.Filter):
    """Prefixes record messages with the trace prefix of the current invocation, if any."""

    def filter(self, record: logging.LogRecord) -> bool:
        prefix = _trace_prefix.get()
        if prefix and not getattr(record, "_trace_prefixed", False):
            record.msg = f"{prefix} {record.msg}"
            record._trace_prefixed = True
        return True


# One filter shared by every InvocationLogging; addFilter ignores duplicates.
TRACE_PREFIX_FILTER = TracePrefixFilter()


class InvocationLogging:
    """
    Applies negotiated level and trace prefix to a logger for one invocation.

    Owned by the global handler; the baseline level is captured once at
    construction, as a number so custom levels survive the round trip.
    """

    def __init__(self, config: Optional[LoggerConfig], target: logging.Logger = None):
        self.config = config
        self.target = target or logging.getLogger()
        self.baseline = self.target.getEffectiveLevel()
        for handler in self.target.handlers:
            handler.addFilter(TRACE_PREFIX_FILTER)

    def apply(self, event: Any) -> Token:
        """Set level and trace prefix; pass the returned token to reset()."""
        self.target.setLevel(calc_log_level(self.baseline, event, self.config))

        prefix = calc_trace_prefix(event, self.config)
        if prefix:
            logger.info(f"Setting trace prefix to {prefix}")
        return _trace_prefix.set(prefix)

    def reset(self, token: Token) -> None:
        _trace_prefix.reset(token)
