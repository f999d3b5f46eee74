# =============================================================================
# Batch Job Runner
# =============================================================================
# Batch jobs are started by publishing a BATCH_JOB_START message to an SNS
# topic that the same Lambda subscribes to. When that message comes back the
# runner claims it ahead of the ordinary SNS handlers and runs each job
# through its registered processor.
# =============================================================================

import inspect
import json
import logging
import os
from functools import cached_property
from typing import Any, Callable, Dict, List, Optional

import boto3

logger = logging.getLogger(__name__)

START_MESSAGE_TYPE = "BATCH_JOB_START"

JobProcessor = Callable[[Dict[str, Any]], Any]


def _parse_message(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Decode the JSON message of the first SNS record."""
    try:
        message = event["Records"][0]["Sns"].get("Message", "")
    except (KeyError, IndexError, TypeError, AttributeError):
        return None
    if isinstance(message, dict):
        return message
    if not isinstance(message, str) or not message:
        return None
    try:
        parsed = json.loads(message)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class BatchJobRunner:
    """
    Batch job subsystem backed by an SNS topic.

    Usage:
        runner = BatchJobRunner(topic_arn, processors={"reindex": reindex})
        runner.start([{"jobType": "reindex", "data": {"table": "orders"}}])
    """

    def __init__(self, topic_arn: str, processors: Dict[str, JobProcessor] = None,
                 region: str = None):
        if not topic_arn:
            raise ValueError("Batch job runner requires a topic ARN")
        self.topic_arn = topic_arn
        self.processors: Dict[str, JobProcessor] = dict(processors or {})
        self.region = region or os.environ.get("AWS_REGION")

    @cached_property
    def sns(self):
        """SNS client (lazy-loaded)."""
        return boto3.client("sns", region_name=self.region)

    def owns_event(self, event: Dict[str, Any]) -> bool:
        """True if the event is a start message published to our topic."""
        try:
            topic_arn = event["Records"][0]["Sns"].get("TopicArn")
        except (KeyError, IndexError, TypeError, AttributeError):
            return False
        if topic_arn != self.topic_arn:
            return False
        message = _parse_message(event)
        return message is not None and message.get("type") == START_MESSAGE_TYPE

    async def invoke(self, event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
        """
        Run every job in the start message.

        Jobs with no registered processor are skipped with a warning.
        Processor exceptions propagate.

        Returns:
            Summary with processed/skipped counts and per-job results
        """
        message = _parse_message(event) or {}
        jobs: List[Dict[str, Any]] = message.get("jobs") or []

        processed = 0
        skipped = 0
        results = []
        for job in jobs:
            job_type = job.get("jobType")
            processor = self.processors.get(job_type)
            if processor is None:
                logger.warning(f"No processor for batch job type: {job_type}")
                skipped += 1
                continue

            logger.info(f"Running batch job type={job_type}")
            result = processor(job.get("data") or {})
            if inspect.isawaitable(result):
                result = await result
            results.append({"jobType": job_type, "result": result})
            processed += 1

        return {"processed": processed, "skipped": skipped, "results": results}

    def start(self, jobs: List[Dict[str, Any]]) -> str:
        """
        Publish a start message for the given jobs.

        Returns:
            SNS MessageId

        Raises:
            botocore.exceptions.ClientError: publish was rejected; left to the caller to log
        """
        message = {"type": START_MESSAGE_TYPE, "jobs": jobs}
        response = self.sns.publish(
            TopicArn=self.topic_arn,
            Message=json.dumps(message, ensure_ascii=False, default=str),
        )
        message_id = response.get("MessageId", "")
        logger.info(f"Published batch job start: {message_id} ({len(jobs)} jobs)")
        return message_id
