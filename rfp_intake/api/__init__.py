"""API modules."""

from rfp_intake.api.app import create_app
from rfp_intake.api.routes import router

__all__ = ["create_app", "router"]

