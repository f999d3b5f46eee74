"""Sample Lambda events shared by the test modules."""
import json
from typing import Any, Dict


def api_gateway_v1_event(method: str = "GET", path: str = "/ping", body: Any = None,
                         query: Dict[str, str] = None) -> Dict[str, Any]:
    return {
        "resource": path,
        "path": path,
        "httpMethod": method,
        "headers": {"content-type": "application/json"},
        "queryStringParameters": query,
        "pathParameters": None,
        "requestContext": {"requestId": "req-v1-123", "httpMethod": method},
        "body": json.dumps(body) if body is not None else None,
        "isBase64Encoded": False,
    }


def api_gateway_v2_event(method: str = "POST", path: str = "/orders", body: Any = None) -> Dict[str, Any]:
    return {
        "version": "2.0",
        "rawPath": path,
        "headers": {"content-type": "application/json"},
        "requestContext": {
            "http": {"method": method, "path": path},
            "requestId": "req-v2-456",
        },
        "body": json.dumps(body) if body is not None else None,
        "isBase64Encoded": False,
    }


def sns_event(topic_arn: str = "arn:aws:sns:ap-south-1:123456789012:alerts",
              message: Any = "hello") -> Dict[str, Any]:
    return {
        "Records": [{
            "EventSource": "aws:sns",
            "EventVersion": "1.0",
            "Sns": {
                "Type": "Notification",
                "MessageId": "sns-msg-1",
                "TopicArn": topic_arn,
                "Message": message if isinstance(message, str) else json.dumps(message),
                "Timestamp": "2026-01-01T00:00:00.000Z",
            },
        }]
    }


def s3_event(event_name: str = "ObjectCreated:Put", bucket: str = "media-bucket",
             key: str = "uploads/photo.jpg") -> Dict[str, Any]:
    return {
        "Records": [{
            "eventVersion": "2.1",
            "eventSource": "aws:s3",
            "eventName": event_name,
            "s3": {
                "bucket": {"name": bucket, "arn": f"arn:aws:s3:::{bucket}"},
                "object": {"key": key, "size": 1024},
            },
        }]
    }


def cron_event(rule_arn: str = "arn:aws:events:ap-south-1:123456789012:rule/nightly") -> Dict[str, Any]:
    return {
        "version": "0",
        "id": "cron-1",
        "detail-type": "Scheduled Event",
        "source": "aws.events",
        "account": "123456789012",
        "time": "2026-01-01T00:00:00Z",
        "region": "ap-south-1",
        "resources": [rule_arn],
        "detail": {},
    }


def dynamo_db_event(stream_arn: str = "arn:aws:dynamodb:ap-south-1:123456789012:table/orders/stream/2026") -> Dict[str, Any]:
    return {
        "Records": [{
            "eventID": "ddb-1",
            "eventName": "INSERT",
            "eventSource": "aws:dynamodb",
            "eventSourceARN": stream_arn,
            "dynamodb": {"Keys": {"pk": {"S": "order#1"}}},
        }]
    }


class FakeContext:
    """Minimal stand-in for the Lambda context object."""
    aws_request_id = "ctx-req-1"
    function_name = "global-dispatch"

    def get_remaining_time_in_millis(self) -> int:
        return 30000
