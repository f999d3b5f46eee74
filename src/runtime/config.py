# =============================================================================
# Dispatch Configuration
# =============================================================================
# Built once per process and read-only afterwards. Each category has an
# optional sub-config (absent = unsupported) and a disable switch
# (absent/False = enabled).
# =============================================================================

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from src.runtime.classify import Category
from src.runtime.log_config import LoggerConfig
from src.runtime.registry import HandlerRegistry

logger = logging.getLogger(__name__)


def _get_env_bool(key: str, default: bool = False) -> bool:
    return os.environ.get(key, str(default)).lower() == "true"


@runtime_checkable
class BatchJobSubsystem(Protocol):
    """Subsystem that may claim SNS events before the SNS registry sees them."""

    def owns_event(self, event: Dict[str, Any]) -> bool: ...

    async def invoke(self, event: Dict[str, Any], context: Any) -> Any: ...


@dataclass(frozen=True)
class DisableSwitches:
    """Force a category off even when it is configured."""
    api_gateway: bool = False
    batch_job: bool = False
    sns: bool = False
    s3: bool = False
    cron: bool = False
    dynamo_db: bool = False

    @classmethod
    def from_env(cls, prefix: str = "DISPATCH_DISABLE_") -> "DisableSwitches":
        """Read DISPATCH_DISABLE_API_GATEWAY=true style variables."""
        return cls(
            api_gateway=_get_env_bool(f"{prefix}API_GATEWAY"),
            batch_job=_get_env_bool(f"{prefix}BATCH_JOB"),
            sns=_get_env_bool(f"{prefix}SNS"),
            s3=_get_env_bool(f"{prefix}S3"),
            cron=_get_env_bool(f"{prefix}CRON"),
            dynamo_db=_get_env_bool(f"{prefix}DYNAMO_DB"),
        )


@dataclass(frozen=True)
class HandlerConfig:
    """Registry of handlers for SNS, cron or DynamoDB events."""
    handlers: HandlerRegistry = field(default_factory=HandlerRegistry)

    def __post_init__(self):
        if not isinstance(self.handlers, HandlerRegistry):
            object.__setattr__(self, "handlers", HandlerRegistry(self.handlers))
        self.handlers.freeze()


@dataclass(frozen=True)
class S3Config:
    create_handlers: HandlerRegistry = field(default_factory=HandlerRegistry)
    remove_handlers: HandlerRegistry = field(default_factory=HandlerRegistry)

    def __post_init__(self):
        for name in ("create_handlers", "remove_handlers"):
            registry = getattr(self, name)
            if not isinstance(registry, HandlerRegistry):
                registry = HandlerRegistry(registry)
                object.__setattr__(self, name, registry)
            registry.freeze()


@dataclass(frozen=True)
class GatewayConfig:
    """
    Attributes:
        routes: Registry keyed by "<METHOD> <path>", e.g. "GET /ping"
        cors: Add CORS headers and answer OPTIONS preflight
        factory: Builds the web handler from this config; defaults to WebHandler
    """
    routes: HandlerRegistry = field(default_factory=HandlerRegistry)
    cors: bool = True
    factory: Optional[Callable[["GatewayConfig"], Any]] = None

    def __post_init__(self):
        if not isinstance(self.routes, HandlerRegistry):
            object.__setattr__(self, "routes", HandlerRegistry(self.routes))
        self.routes.freeze()


@dataclass(frozen=True)
class DispatchConfig:
    """
    Top-level configuration for the global handler.

    Any sub-config left as None means that category is not supported.
    """
    api_gateway: Optional[GatewayConfig] = None
    batch_job: Optional[BatchJobSubsystem] = None
    sns: Optional[HandlerConfig] = None
    s3: Optional[S3Config] = None
    cron: Optional[HandlerConfig] = None
    dynamo_db: Optional[HandlerConfig] = None
    disabled: DisableSwitches = field(default_factory=DisableSwitches)
    logger_config: Optional[LoggerConfig] = None

    def __post_init__(self):
        if self.disabled is None:
            object.__setattr__(self, "disabled", DisableSwitches())
        if self.batch_job is not None and not isinstance(self.batch_job, BatchJobSubsystem):
            raise TypeError("batch_job must provide owns_event() and invoke()")

    def gateway_enabled(self) -> bool:
        return self.api_gateway is not None and not self.disabled.api_gateway

    def batch_job_enabled(self) -> bool:
        return self.batch_job is not None and not self.disabled.batch_job

    def registry_for(self, category: Category) -> Optional[HandlerRegistry]:
        """
        Registry serving a category, or None when the category is
        unconfigured or disabled.
        """
        if category == Category.SNS:
            if self.sns is not None and not self.disabled.sns:
                return self.sns.handlers
        elif category == Category.S3_CREATE:
            if self.s3 is not None and not self.disabled.s3:
                return self.s3.create_handlers
        elif category == Category.S3_REMOVE:
            if self.s3 is not None and not self.disabled.s3:
                return self.s3.remove_handlers
        elif category == Category.CRON:
            if self.cron is not None and not self.disabled.cron:
                return self.cron.handlers
        elif category == Category.DYNAMO_DB:
            if self.dynamo_db is not None and not self.disabled.dynamo_db:
                return self.dynamo_db.handlers
        return None

    def summary(self) -> Dict[str, bool]:
        """Enabled state per category."""
        return {
            "api_gateway": self.gateway_enabled(),
            "batch_job": self.batch_job_enabled(),
            "sns": self.registry_for(Category.SNS) is not None,
            "s3": self.registry_for(Category.S3_CREATE) is not None,
            "cron": self.registry_for(Category.CRON) is not None,
            "dynamo_db": self.registry_for(Category.DYNAMO_DB) is not None,
        }
