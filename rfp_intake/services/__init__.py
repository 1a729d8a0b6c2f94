"""Application services."""

from rfp_intake.services.analysis import AnalysisService
from rfp_intake.services.container import ServiceContainer, get_container

__all__ = ["AnalysisService", "ServiceContainer", "get_container"]
