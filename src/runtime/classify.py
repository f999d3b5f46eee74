# =============================================================================
# Event Classifier - Detect Lambda Event Category
# =============================================================================
# Assigns exactly one Category to a raw Lambda event and derives the key used
# to look up its handler.
# Supports: API Gateway, SNS, S3, CloudWatch scheduled events, DynamoDB streams
# =============================================================================

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Closed set of event categories."""
    API_GATEWAY = "api_gateway"
    SNS = "sns"
    S3_CREATE = "s3_create"
    S3_REMOVE = "s3_remove"
    CRON = "cron"
    DYNAMO_DB = "dynamo_db"
    UNRECOGNIZED = "unrecognized"


S3_REMOVE_PREFIX = "ObjectRemoved"


def _first_record(event: Any) -> Optional[Dict[str, Any]]:
    if not isinstance(event, dict):
        return None
    records = event.get("Records")
    if isinstance(records, list) and records and isinstance(records[0], dict):
        return records[0]
    return None


# =============================================================================
# SHAPE PREDICATES
# =============================================================================

def is_api_gateway_event(event: Any) -> bool:
    """REST API (v1) or HTTP API (v2) proxy event."""
    if not isinstance(event, dict):
        return False
    request_context = event.get("requestContext")
    if not isinstance(request_context, dict):
        return False
    if "httpMethod" in event or "httpMethod" in request_context:
        return True
    return isinstance(request_context.get("http"), dict)


def is_sns_event(event: Any) -> bool:
    record = _first_record(event)
    if record is None:
        return False
    source = record.get("EventSource", record.get("eventSource"))
    return isinstance(record.get("Sns"), dict) and source in (None, "aws:sns")


def is_s3_event(event: Any) -> bool:
    record = _first_record(event)
    if record is None:
        return False
    return record.get("eventSource") == "aws:s3" and isinstance(record.get("s3"), dict)


def is_cron_event(event: Any) -> bool:
    """CloudWatch / EventBridge scheduled rule."""
    if not isinstance(event, dict):
        return False
    resources = event.get("resources")
    return (
        event.get("source") == "aws.events"
        and isinstance(resources, list)
        and len(resources) > 0
    )


def is_dynamo_db_event(event: Any) -> bool:
    record = _first_record(event)
    if record is None:
        return False
    return record.get("eventSource") == "aws:dynamodb"


def _s3_category(event: Dict[str, Any]) -> Category:
    event_name = _first_record(event).get("eventName") or ""
    if event_name.startswith(S3_REMOVE_PREFIX):
        return Category.S3_REMOVE
    return Category.S3_CREATE


# Evaluated in order, first match wins
CLASSIFIERS: List[Tuple[Callable[[Any], bool], Callable[[Any], Category]]] = [
    (is_api_gateway_event, lambda event: Category.API_GATEWAY),
    (is_sns_event, lambda event: Category.SNS),
    (is_s3_event, _s3_category),
    (is_cron_event, lambda event: Category.CRON),
    (is_dynamo_db_event, lambda event: Category.DYNAMO_DB),
]


def classify(event: Any) -> Category:
    """
    Assign a category to a raw Lambda event.

    Predicates are checked in CLASSIFIERS order; the first one that accepts
    the event decides. S3 events are split into create/remove on the
    eventName of the first record.

    Returns:
        Category.UNRECOGNIZED if no predicate accepts the event
    """
    for predicate, to_category in CLASSIFIERS:
        if predicate(event):
            return to_category(event)
    return Category.UNRECOGNIZED


# =============================================================================
# HANDLER KEYS
# =============================================================================

def _sns_key(event: Dict[str, Any]) -> str:
    return _first_record(event)["Sns"].get("TopicArn", "")


def _s3_key(event: Dict[str, Any]) -> str:
    s3 = _first_record(event)["s3"]
    bucket = (s3.get("bucket") or {}).get("name", "")
    key = (s3.get("object") or {}).get("key", "")
    return f"{bucket}/{key}"


def _cron_key(event: Dict[str, Any]) -> str:
    return event["resources"][0]


def _dynamo_db_key(event: Dict[str, Any]) -> str:
    return _first_record(event).get("eventSourceARN", "")


_KEY_DERIVERS: Dict[Category, Callable[[Dict[str, Any]], str]] = {
    Category.SNS: _sns_key,
    Category.S3_CREATE: _s3_key,
    Category.S3_REMOVE: _s3_key,
    Category.CRON: _cron_key,
    Category.DYNAMO_DB: _dynamo_db_key,
}


def handler_key(category: Category, event: Dict[str, Any]) -> Optional[str]:
    """
    Derive the registry lookup key for an already classified event.

    Only the first record of a batched event is consulted.
    Returns None for categories that are not resolved through a registry.
    """
    derive = _KEY_DERIVERS.get(category)
    if derive is None:
        return None
    return derive(event)
