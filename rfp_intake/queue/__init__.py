"""Analysis job queue."""

from rfp_intake.queue.backoff import backoff_seconds
from rfp_intake.queue.base import AnalysisQueue
from rfp_intake.queue.sql_queue import SQLAnalysisQueue

__all__ = ["AnalysisQueue", "SQLAnalysisQueue", "backoff_seconds"]
