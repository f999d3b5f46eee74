# =============================================================================
# Dispatch Engine
# =============================================================================
# classify -> category gate -> resolve handler -> invoke -> outcome.
# Owns the lazily built, memoized web handler for API Gateway events.
# Exceptions are NOT caught here; the global handler contains them.
# =============================================================================

import inspect
import logging
import threading
from typing import Any, Dict, Optional

from src.runtime.classify import Category, classify, handler_key
from src.runtime.config import DispatchConfig, GatewayConfig
from src.runtime.outcome import DispatchOutcome
from src.runtime.registry import HandlerFunc

logger = logging.getLogger(__name__)


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


def _default_web_handler_factory(gateway_config: GatewayConfig) -> Any:
    from src.app.web_handler import WebHandler
    return WebHandler(gateway_config)


class DispatchEngine:
    """
    Routes one classified event to its handler.

    The web handler for API Gateway events is expensive to set up, so it is
    built on first use and reused for the rest of the warm process. It is
    never built when the gateway category is unconfigured or disabled.
    """

    def __init__(self, config: DispatchConfig):
        if config is None:
            raise ValueError("Cannot create dispatch engine with null config")
        self.config = config
        self._web_handler: Any = None
        self._web_handler_lock = threading.Lock()

    # ==========================================================================
    # Memoized sub-dispatchers
    # ==========================================================================

    def fetch_web_handler(self) -> Optional[Any]:
        if self._web_handler is None and self.config.gateway_enabled():
            with self._web_handler_lock:
                if self._web_handler is None:
                    gateway_config = self.config.api_gateway
                    factory = gateway_config.factory or _default_web_handler_factory
                    logger.info("Building web handler for API Gateway events")
                    self._web_handler = factory(gateway_config)
        return self._web_handler

    def fetch_batch_job(self) -> Optional[Any]:
        return self.config.batch_job if self.config.batch_job_enabled() else None

    # ==========================================================================
    # Dispatch
    # ==========================================================================

    async def dispatch(self, event: Dict[str, Any], context: Any) -> DispatchOutcome:
        """
        Dispatch a single event.

        Args:
            event: Raw Lambda event
            context: Lambda context, passed through to sub-dispatchers

        Returns:
            SUCCESS with the handler's value, or NO_HANDLER. Handler
            exceptions propagate to the caller.
        """
        category = classify(event)

        if category == Category.UNRECOGNIZED:
            logger.warning(f"Unrecognized event, no handler: {event}")
            return DispatchOutcome.no_handler(category)

        logger.debug(f"Dispatching category={category.value} event={event}")

        if category == Category.API_GATEWAY:
            return await self._dispatch_api_gateway(event, context)
        if category == Category.SNS:
            return await self._dispatch_sns(event, context)
        return await self._dispatch_registry(category, event)

    async def _dispatch_api_gateway(self, event: Dict[str, Any], context: Any) -> DispatchOutcome:
        web_handler = self.fetch_web_handler()
        if web_handler is None:
            logger.info("API Gateway event, but no web handler configured or it is disabled")
            return DispatchOutcome.no_handler(Category.API_GATEWAY)
        result = await _maybe_await(web_handler.invoke(event, context))
        return DispatchOutcome.success(result, Category.API_GATEWAY)

    async def _dispatch_sns(self, event: Dict[str, Any], context: Any) -> DispatchOutcome:
        # Batch job start messages share the SNS shape; the batch subsystem wins
        batch_job = self.fetch_batch_job()
        if batch_job is not None and batch_job.owns_event(event):
            logger.info("SNS event claimed by batch job subsystem")
            result = await _maybe_await(batch_job.invoke(event, context))
            return DispatchOutcome.success(result, Category.SNS)
        return await self._dispatch_registry(Category.SNS, event)

    async def _dispatch_registry(self, category: Category, event: Dict[str, Any]) -> DispatchOutcome:
        registry = self.config.registry_for(category)
        if registry is None:
            logger.info(f"Category {category.value} is not configured or is disabled")
            return DispatchOutcome.no_handler(category)

        key = handler_key(category, event)
        handler: Optional[HandlerFunc] = registry.resolve(key)
        if handler is None:
            logger.info(f"Found no {category.value} handler for: {key}")
            return DispatchOutcome.no_handler(category, key)

        result = await _maybe_await(handler(event))
        return DispatchOutcome.success(result, category, key)
