#!/usr/bin/env python3
"""
Tests for the SNS-backed batch job runner.

Run with: pytest tests/test_batch_job.py -v
"""
import asyncio
import json
import logging
import os
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from botocore.exceptions import ClientError

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set required environment variables BEFORE imports
os.environ.setdefault("AWS_REGION", "ap-south-1")

from src.batch.job_runner import START_MESSAGE_TYPE, BatchJobRunner
from src.runtime import DispatchConfig, GlobalHandler, HandlerConfig
from sample_events import FakeContext, sns_event

TOPIC_ARN = "arn:aws:sns:ap-south-1:123456789012:batch-jobs"


def start_event(jobs, topic_arn: str = TOPIC_ARN):
    return sns_event(topic_arn, {"type": START_MESSAGE_TYPE, "jobs": jobs})


class TestOwnsEvent:

    def test_start_message_on_topic(self):
        runner = BatchJobRunner(TOPIC_ARN)
        assert runner.owns_event(start_event([])) is True

    def test_other_topic(self):
        runner = BatchJobRunner(TOPIC_ARN)
        assert runner.owns_event(start_event([], topic_arn="arn:other")) is False

    def test_ordinary_message_on_topic(self):
        runner = BatchJobRunner(TOPIC_ARN)
        assert runner.owns_event(sns_event(TOPIC_ARN, {"type": "SOMETHING_ELSE"})) is False
        assert runner.owns_event(sns_event(TOPIC_ARN, "not json")) is False

    def test_malformed_event(self):
        runner = BatchJobRunner(TOPIC_ARN)
        assert runner.owns_event({}) is False
        assert runner.owns_event({"Records": []}) is False

    def test_requires_topic(self):
        with pytest.raises(ValueError):
            BatchJobRunner("")


class TestInvoke:

    def test_runs_registered_processors(self):
        reindex = MagicMock(return_value="reindexed")
        purge = AsyncMock(return_value=12)
        runner = BatchJobRunner(TOPIC_ARN, processors={"reindex": reindex, "purge": purge})

        result = asyncio.run(runner.invoke(start_event([
            {"jobType": "reindex", "data": {"table": "orders"}},
            {"jobType": "purge"},
            {"jobType": "unknown"},
        ]), FakeContext()))

        assert result == {
            "processed": 2,
            "skipped": 1,
            "results": [
                {"jobType": "reindex", "result": "reindexed"},
                {"jobType": "purge", "result": 12},
            ],
        }
        reindex.assert_called_once_with({"table": "orders"})
        purge.assert_awaited_once_with({})

    def test_processor_exception_propagates(self):
        runner = BatchJobRunner(TOPIC_ARN, processors={"boom": MagicMock(side_effect=RuntimeError("x"))})

        with pytest.raises(RuntimeError):
            asyncio.run(runner.invoke(start_event([{"jobType": "boom"}])))


class TestStart:

    def test_publishes_start_message(self):
        runner = BatchJobRunner(TOPIC_ARN)
        runner.sns = MagicMock()
        runner.sns.publish.return_value = {"MessageId": "mid-1"}

        message_id = runner.start([{"jobType": "reindex", "data": {}}])

        assert message_id == "mid-1"
        kwargs = runner.sns.publish.call_args.kwargs
        assert kwargs["TopicArn"] == TOPIC_ARN
        assert json.loads(kwargs["Message"]) == {
            "type": START_MESSAGE_TYPE,
            "jobs": [{"jobType": "reindex", "data": {}}],
        }

    def test_published_message_is_owned(self):
        """A message published by start() is claimed when it comes back."""
        runner = BatchJobRunner(TOPIC_ARN)
        runner.sns = MagicMock()
        runner.sns.publish.return_value = {"MessageId": "mid-2"}
        runner.start([])

        message = runner.sns.publish.call_args.kwargs["Message"]
        assert runner.owns_event(sns_event(TOPIC_ARN, message)) is True

    def test_client_error_is_raised(self, caplog):
        runner = BatchJobRunner(TOPIC_ARN)
        runner.sns = MagicMock()
        runner.sns.publish.side_effect = ClientError(
            {"Error": {"Code": "NotFound", "Message": "Topic does not exist"}}, "Publish"
        )

        with pytest.raises(ClientError):
            runner.start([])
        assert not [r for r in caplog.records if r.levelno >= logging.ERROR]

    def test_client_error_logged_once_at_barrier(self, caplog):
        runner = BatchJobRunner(TOPIC_ARN)
        runner.sns = MagicMock()
        runner.sns.publish.side_effect = ClientError(
            {"Error": {"Code": "NotFound", "Message": "Topic does not exist"}}, "Publish"
        )
        global_handler = GlobalHandler(DispatchConfig(
            sns=HandlerConfig({"arn:kickoff": lambda event: runner.start([{"jobType": "reindex"}])}),
        ))

        assert global_handler.lambda_handler(sns_event("arn:kickoff"), FakeContext()) is False
        errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert "NotFound" in errors[0].getMessage()

    def test_region_from_environment(self):
        with patch.dict(os.environ, {"AWS_REGION": "eu-west-1"}):
            assert BatchJobRunner(TOPIC_ARN).region == "eu-west-1"
        with patch.dict(os.environ, clear=True):
            assert BatchJobRunner(TOPIC_ARN).region is None
        assert BatchJobRunner(TOPIC_ARN, region="us-east-1").region == "us-east-1"


class TestGlobalHandlerIntegration:

    def test_batch_job_takes_precedence_over_sns_handlers(self):
        sns_handler = MagicMock(return_value="ordinary")
        processor = MagicMock(return_value="ran")
        runner = BatchJobRunner(TOPIC_ARN, processors={"reindex": processor})
        global_handler = GlobalHandler(DispatchConfig(
            batch_job=runner,
            sns=HandlerConfig({".*": sns_handler}),
        ))

        result = global_handler.lambda_handler(start_event([{"jobType": "reindex"}]), FakeContext())

        assert result["processed"] == 1
        sns_handler.assert_not_called()

    def test_ordinary_notification_on_same_topic(self):
        sns_handler = MagicMock(return_value="ordinary")
        runner = BatchJobRunner(TOPIC_ARN)
        global_handler = GlobalHandler(DispatchConfig(
            batch_job=runner,
            sns=HandlerConfig({TOPIC_ARN: sns_handler}),
        ))

        assert global_handler.lambda_handler(sns_event(TOPIC_ARN, "hi"), None) == "ordinary"
