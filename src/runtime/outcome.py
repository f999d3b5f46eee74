# =============================================================================
# Dispatch Outcome - Result of One Invocation
# =============================================================================
# Every invocation ends in exactly one of: a handler result, no applicable
# handler, or a contained failure. The three are never conflated.
# =============================================================================

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from src.runtime.classify import Category

# Value handed back to the Lambda runtime when a failure was contained.
# Distinct from None, which means "no handler".
DISPATCH_FAILED = False


class OutcomeStatus(str, Enum):
    """How an invocation terminated."""
    SUCCESS = "success"          # Handler ran and returned a value
    NO_HANDLER = "no_handler"    # Unrecognized, disabled, unconfigured or unmatched
    FAILED = "failed"            # Exception caught at the outer edge


@dataclass(frozen=True)
class DispatchOutcome:
    """
    Tagged result of a single dispatch.

    Attributes:
        status: Which variant this is
        category: Category the event was classified as (if it got that far)
        value: Handler return value (SUCCESS only)
        error: Exception that was contained (FAILED only)
        key: Handler key derived from the event, when there was one
        finished_at: When the outcome was produced
    """
    status: OutcomeStatus
    category: Optional[Category] = None
    value: Any = None
    error: Optional[BaseException] = None
    key: Optional[str] = None
    finished_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def is_success(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_no_handler(self) -> bool:
        return self.status == OutcomeStatus.NO_HANDLER

    @property
    def is_failed(self) -> bool:
        return self.status == OutcomeStatus.FAILED

    def to_lambda_result(self) -> Any:
        """
        Value returned to the Lambda runtime.

        SUCCESS -> handler value, NO_HANDLER -> None, FAILED -> DISPATCH_FAILED
        """
        if self.is_success:
            return self.value
        if self.is_failed:
            return DISPATCH_FAILED
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Log/diagnostic view of the outcome."""
        return {
            "status": self.status.value,
            "category": self.category.value if self.category else None,
            "key": self.key,
            "error": repr(self.error) if self.error else None,
            "finishedAt": self.finished_at,
        }

    @classmethod
    def success(cls, value: Any, category: Category = None, key: str = None) -> "DispatchOutcome":
        return cls(status=OutcomeStatus.SUCCESS, category=category, value=value, key=key)

    @classmethod
    def no_handler(cls, category: Category = None, key: str = None) -> "DispatchOutcome":
        return cls(status=OutcomeStatus.NO_HANDLER, category=category, key=key)

    @classmethod
    def failed(cls, error: BaseException, category: Category = None) -> "DispatchOutcome":
        return cls(status=OutcomeStatus.FAILED, category=category, error=error)
