# =============================================================================
# Web Handler
# =============================================================================
# Routes API Gateway (REST v1 / HTTP v2) proxy events to route handlers and
# formats proxy responses. Built once per warm process by the dispatch engine.
# =============================================================================

import base64
import inspect
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict

from src.runtime.config import GatewayConfig

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
}


@dataclass
class WebRequest:
    """Parsed API Gateway request handed to route handlers."""
    method: str
    path: str
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)
    query: Dict[str, str] = field(default_factory=dict)
    path_parameters: Dict[str, str] = field(default_factory=dict)
    request_id: str = ""
    raw_event: Dict[str, Any] = field(default_factory=dict)
    context: Any = None

    @property
    def route_key(self) -> str:
        return f"{self.method} {self.path}"


def parse_request(event: Dict[str, Any], context: Any = None) -> WebRequest:
    """
    Parse API Gateway HTTP API or REST API event.

    Binary bodies that are not UTF-8 text stay as bytes.

    Raises:
        ValueError: body is flagged base64 but is not valid base64
    """
    request_context = event.get("requestContext") or {}
    http = request_context.get("http") or {}

    method = (http.get("method") or event.get("httpMethod") or request_context.get("httpMethod") or "").upper()
    path = http.get("path") or event.get("path") or event.get("rawPath") or "/"

    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        # binascii.Error (a ValueError) for malformed base64
        body = base64.b64decode(body, validate=True)
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            pass
    if isinstance(body, str) and body:
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            pass

    return WebRequest(
        method=method,
        path=path,
        body=body,
        headers=event.get("headers") or {},
        query=event.get("queryStringParameters") or {},
        path_parameters=event.get("pathParameters") or {},
        request_id=request_context.get("requestId", ""),
        raw_event=event,
        context=context,
    )


def api_response(data: Any, status_code: int = 200, cors: bool = True) -> Dict[str, Any]:
    """Format response for API Gateway."""
    headers = {"Content-Type": "application/json"}
    if cors:
        headers.update(CORS_HEADERS)
    return {
        "statusCode": status_code,
        "headers": headers,
        "body": json.dumps(data, ensure_ascii=False, default=str),
    }


def _is_proxy_response(result: Any) -> bool:
    return isinstance(result, dict) and "statusCode" in result and "body" in result


class WebHandler:
    """
    Sub-dispatcher for API Gateway events.

    Route handlers take a WebRequest and return either a full proxy
    response (a dict with statusCode and body) or any JSON-serializable value,
    which is wrapped in a 200 response.
    """

    def __init__(self, config: GatewayConfig):
        if config is None:
            raise ValueError("Cannot create web handler with null config")
        self.config = config
        self.routes = config.routes
        logger.info(f"Web handler routes: {self.routes.patterns}")

    async def invoke(self, event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        try:
            request = parse_request(event, context)
        except ValueError as e:
            logger.warning(f"Rejecting malformed request body: {e}")
            return api_response({"error": "Invalid request body"}, 400, self.config.cors)

        if request.method == "OPTIONS" and self.config.cors:
            return {"statusCode": 204, "headers": dict(CORS_HEADERS), "body": ""}

        route = self.routes.resolve(request.route_key)
        if route is None:
            logger.info(f"No route for: {request.route_key}")
            return api_response(
                {"error": f"No route for {request.route_key}"}, 404, self.config.cors
            )

        try:
            result = route(request)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.exception(f"Route handler error for '{request.route_key}': {e}")
            return api_response(
                {"error": f"Internal error: {e}", "requestId": request.request_id},
                500,
                self.config.cors,
            )

        if _is_proxy_response(result):
            return result
        return api_response(result, 200, self.config.cors)


def route_key(method: str, path: str) -> str:
    """Registry pattern for an exact method/path pair."""
    return f"{method.upper()} {re.escape(path)}"
