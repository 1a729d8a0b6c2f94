"""Configuration for RFP Intake."""

from rfp_intake.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
