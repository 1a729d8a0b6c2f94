"""RFP lifecycle state machine."""

from rfp_intake.lifecycle.state_machine import (
    ALLOWED_TRANSITIONS,
    MANUAL_TRANSITIONS,
    can_transition,
    transition_patch,
    validate_transition,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "MANUAL_TRANSITIONS",
    "can_transition",
    "transition_patch",
    "validate_transition",
]
