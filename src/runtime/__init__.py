# =============================================================================
# Runtime Package - Global Event Dispatch
# =============================================================================
# Single Lambda entry point for events from:
# - API Gateway (HTTP)
# - SNS (incl. batch job start messages)
# - S3 object created / removed notifications
# - CloudWatch / EventBridge scheduled rules
# - DynamoDB streams
# =============================================================================

from src.runtime.classify import Category, classify, handler_key
from src.runtime.config import (
    BatchJobSubsystem,
    DisableSwitches,
    DispatchConfig,
    GatewayConfig,
    HandlerConfig,
    S3Config,
)
from src.runtime.dispatch import DispatchEngine
from src.runtime.global_handler import GlobalHandler
from src.runtime.log_config import LoggerConfig
from src.runtime.outcome import DISPATCH_FAILED, DispatchOutcome, OutcomeStatus
from src.runtime.registry import HandlerRegistry

__all__ = [
    "Category",
    "classify",
    "handler_key",
    "BatchJobSubsystem",
    "DisableSwitches",
    "DispatchConfig",
    "GatewayConfig",
    "HandlerConfig",
    "S3Config",
    "DispatchEngine",
    "GlobalHandler",
    "LoggerConfig",
    "DISPATCH_FAILED",
    "DispatchOutcome",
    "OutcomeStatus",
    "HandlerRegistry",
]
