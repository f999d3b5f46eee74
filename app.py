import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from src.app.web_handler import WebRequest, route_key
from src.batch.job_runner import BatchJobRunner
from src.runtime import (
    DispatchConfig,
    DisableSwitches,
    GatewayConfig,
    GlobalHandler,
    HandlerRegistry,
    LoggerConfig,
)

# ---------- Logger ----------
logger = logging.getLogger()
logger.setLevel(logging.INFO)


# =============================================================================
# ROUTES
# =============================================================================
routes = HandlerRegistry()


@routes.register(route_key("GET", "/ping"))
def handle_ping(request: WebRequest) -> Dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "requestId": request.request_id,
    }


# =============================================================================
# CONFIGURATION
# =============================================================================

def build_config() -> DispatchConfig:
    """Dispatch config from environment variables."""
    batch_job = None
    topic_arn = os.environ.get("BATCH_JOB_TOPIC_ARN", "")
    if topic_arn:
        batch_job = BatchJobRunner(topic_arn)

    return DispatchConfig(
        api_gateway=GatewayConfig(routes=routes),
        batch_job=batch_job,
        disabled=DisableSwitches.from_env(),
        logger_config=LoggerConfig.from_env(),
    )


# Built on first invocation, reused while the container is warm
_global_handler: Optional[GlobalHandler] = None


def get_global_handler() -> GlobalHandler:
    global _global_handler
    if _global_handler is None:
        _global_handler = GlobalHandler(build_config())
    return _global_handler


def lambda_handler(event: Dict[str, Any], context: Any) -> Any:
    return get_global_handler().lambda_handler(event, context)
