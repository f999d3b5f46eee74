# =============================================================================
# Global Handler - Lambda Entry Adapter
# =============================================================================
# Outer edge of every invocation. Nothing raised by log setup,
# classification, resolution or a handler escapes to the Lambda runtime:
# it is logged once and turned into a FAILED outcome.
# =============================================================================

import asyncio
import logging
from typing import Any, Dict

from src.runtime.config import DispatchConfig
from src.runtime.dispatch import DispatchEngine
from src.runtime.log_config import InvocationLogging
from src.runtime.outcome import DispatchOutcome

logger = logging.getLogger(__name__)


def _request_id(context: Any) -> str:
    return getattr(context, "aws_request_id", None) or "-"


class GlobalHandler:
    """
    Adapter from a plain Lambda handler to the configured dispatchers.

    Usage:
        handler = GlobalHandler(DispatchConfig(sns=HandlerConfig(...)))

        def lambda_handler(event, context):
            return handler.lambda_handler(event, context)
    """

    def __init__(self, config: DispatchConfig):
        if config is None:
            raise ValueError("Cannot create with null config")
        if not isinstance(config, DispatchConfig):
            raise TypeError(f"Expected DispatchConfig, got {type(config).__name__}")
        self.config = config
        self.engine = DispatchEngine(config)
        self.invocation_logging = InvocationLogging(config.logger_config)
        logger.info(f"Global handler ready: {config.summary()}")

    async def handle(self, event: Dict[str, Any], context: Any = None) -> DispatchOutcome:
        """
        Dispatch one event and always return an outcome.

        Returns:
            DispatchOutcome; FAILED when any stage raised
        """
        token = None
        try:
            token = self.invocation_logging.apply(event)
            return await self.engine.dispatch(event, context)
        except (Exception, asyncio.CancelledError) as e:
            logger.exception(
                f"Error slipped out to outer edge (request_id={_request_id(context)}), "
                f"returning failure: {e!r} event={event}"
            )
            return DispatchOutcome.failed(e)
        finally:
            if token is not None:
                self.invocation_logging.reset(token)

    def lambda_handler(self, event: Dict[str, Any], context: Any = None) -> Any:
        """
        Synchronous Lambda entry point.

        Returns:
            Handler value, None when no handler applied, or DISPATCH_FAILED
        """
        outcome = asyncio.run(self.handle(event, context))
        return outcome.to_lambda_result()

    __call__ = lambda_handler
