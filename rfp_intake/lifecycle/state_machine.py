"""Allowed RFP status transitions and the field rules that go with them."""

from typing import Any

from rfp_intake.errors import InvalidStateTransition
from rfp_intake.models.records import RfpStatus

ALLOWED_TRANSITIONS: dict[RfpStatus, set[RfpStatus]] = {
    RfpStatus.UPLOADED: {RfpStatus.PROCESSING},
    RfpStatus.PROCESSING: {RfpStatus.ANALYZED, RfpStatus.ERROR},
    RfpStatus.ANALYZED: set(),
    RfpStatus.ERROR: set(),
}

# Only reachable through an explicit re-analysis request
MANUAL_TRANSITIONS: dict[RfpStatus, set[RfpStatus]] = {
    RfpStatus.ANALYZED: {RfpStatus.PROCESSING},
    RfpStatus.ERROR: {RfpStatus.PROCESSING},
}


def can_transition(current: RfpStatus, target: RfpStatus, manual: bool = False) -> bool:
    """Return True if ``current -> target`` is permitted."""
    if target in ALLOWED_TRANSITIONS.get(current, set()):
        return True
    return manual and target in MANUAL_TRANSITIONS.get(current, set())


def validate_transition(current: RfpStatus, target: RfpStatus, manual: bool = False) -> None:
    """Raise InvalidStateTransition unless ``current -> target`` is permitted."""
    current = RfpStatus(current)
    target = RfpStatus(target)
    if can_transition(current, target, manual=manual):
        return

    reason = None
    if target in MANUAL_TRANSITIONS.get(current, set()):
        reason = "requires an explicit re-analysis request"
    raise InvalidStateTransition(current.value, target.value, reason=reason)


def transition_patch(target: RfpStatus, patch: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the field patch to apply alongside a status change.

    ``analysis_result`` is set exactly when the target is analyzed and
    ``error_detail`` exactly when the target is error.
    """
    target = RfpStatus(target)
    patch = dict(patch or {})

    if target == RfpStatus.ANALYZED:
        if patch.get("analysis_result") is None:
            raise InvalidStateTransition(
                RfpStatus.PROCESSING.value, target.value, reason="an analysis result is required"
            )
        patch["error_detail"] = None
    elif target == RfpStatus.ERROR:
        detail = patch.get("error_detail")
        if not detail or not str(detail).strip():
            raise InvalidStateTransition(
                RfpStatus.PROCESSING.value, target.value, reason="an error detail is required"
            )
        patch["analysis_result"] = None
    else:
        patch["analysis_result"] = None
        patch["error_detail"] = None

    patch["status"] = target
    return patch
