from src.batch.job_runner import START_MESSAGE_TYPE, BatchJobRunner

__all__ = ["BatchJobRunner", "START_MESSAGE_TYPE"]
