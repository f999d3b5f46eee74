# =============================================================================
# Application Sub-Dispatchers
# =============================================================================
# Transport adapters the dispatch engine hands events to.
# =============================================================================

from src.app.web_handler import WebHandler, WebRequest, api_response, parse_request, route_key

__all__ = [
    "WebHandler",
    "WebRequest",
    "api_response",
    "parse_request",
    "route_key",
]
