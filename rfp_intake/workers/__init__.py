"""Analysis workers."""

from rfp_intake.workers.pool import AnalysisWorkerPool

__all__ = ["AnalysisWorkerPool"]
