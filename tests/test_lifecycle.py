"""Tests for the RFP status state machine."""

import pytest

from rfp_intake.errors import InvalidStateTransition
from rfp_intake.lifecycle import can_transition, transition_patch, validate_transition
from rfp_intake.models.records import AnalysisResult, RfpStatus


class TestTransitions:
    """Tests for allowed and rejected transitions."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (RfpStatus.UPLOADED, RfpStatus.PROCESSING),
            (RfpStatus.PROCESSING, RfpStatus.ANALYZED),
            (RfpStatus.PROCESSING, RfpStatus.ERROR),
        ],
    )
    def test_automatic_transitions(self, current, target):
        assert can_transition(current, target)
        validate_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (RfpStatus.UPLOADED, RfpStatus.ANALYZED),
            (RfpStatus.UPLOADED, RfpStatus.ERROR),
            (RfpStatus.ANALYZED, RfpStatus.ERROR),
            (RfpStatus.ERROR, RfpStatus.ANALYZED),
            (RfpStatus.PROCESSING, RfpStatus.UPLOADED),
            (RfpStatus.ANALYZED, RfpStatus.UPLOADED),
        ],
    )
    def test_rejected_transitions(self, current, target):
        assert not can_transition(current, target)
        assert not can_transition(current, target, manual=True)
        with pytest.raises(InvalidStateTransition):
            validate_transition(current, target, manual=True)

    @pytest.mark.parametrize("current", [RfpStatus.ANALYZED, RfpStatus.ERROR])
    def test_reanalysis_requires_manual(self, current):
        with pytest.raises(InvalidStateTransition, match="explicit re-analysis"):
            validate_transition(current, RfpStatus.PROCESSING)
        validate_transition(current, RfpStatus.PROCESSING, manual=True)

    def test_accepts_string_values(self):
        validate_transition("uploaded", "processing")

    def test_terminal_statuses(self):
        assert RfpStatus.ANALYZED.is_terminal
        assert RfpStatus.ERROR.is_terminal
        assert not RfpStatus.PROCESSING.is_terminal


class TestTransitionPatch:
    """Tests for the field rules applied with a status change."""

    def test_analyzed_requires_result(self):
        with pytest.raises(InvalidStateTransition, match="analysis result"):
            transition_patch(RfpStatus.ANALYZED, {})

    def test_analyzed_clears_error(self):
        result = AnalysisResult(summary="ok")
        patch = transition_patch(RfpStatus.ANALYZED, {"analysis_result": result, "error_detail": "old"})
        assert patch["status"] == RfpStatus.ANALYZED
        assert patch["analysis_result"] is result
        assert patch["error_detail"] is None

    @pytest.mark.parametrize("detail", [None, "", "   "])
    def test_error_requires_detail(self, detail):
        with pytest.raises(InvalidStateTransition, match="error detail"):
            transition_patch(RfpStatus.ERROR, {"error_detail": detail})

    def test_error_clears_result(self):
        patch = transition_patch(
            RfpStatus.ERROR,
            {"error_detail": "LLM provider timed out", "analysis_result": AnalysisResult()},
        )
        assert patch["error_detail"] == "LLM provider timed out"
        assert patch["analysis_result"] is None

    def test_processing_clears_both(self):
        patch = transition_patch(RfpStatus.PROCESSING, {"extracted_text": "text"})
        assert patch == {
            "extracted_text": "text",
            "analysis_result": None,
            "error_detail": None,
            "status": RfpStatus.PROCESSING,
        }

    def test_input_patch_not_mutated(self):
        original = {"error_detail": "boom"}
        transition_patch(RfpStatus.ERROR, original)
        assert original == {"error_detail": "boom"}
