"""Error taxonomy for the ingestion and analysis pipeline."""

from typing import Any


class RfpIntakeError(Exception):
    """Base class for all pipeline errors."""

    error_code = "rfp_intake_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error bodies."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class DuplicateContent(RfpIntakeError):
    """Upload matches an existing RFP of the same organization.

    Not a failure: the upload short-circuits to the existing record.
    """

    error_code = "duplicate_content"

    def __init__(self, rfp_id: str, status: str):
        super().__init__("This RFP has already been uploaded", rfp_id=rfp_id, status=status)
        self.rfp_id = rfp_id
        self.status = status


class DuplicateRecordError(RfpIntakeError):
    """Record store rejected a create on the (organization, content hash) constraint."""

    error_code = "duplicate_record"


class UnsupportedFormat(RfpIntakeError):
    """Document format cannot be accepted or extracted."""

    error_code = "unsupported_format"


class FileTooLarge(RfpIntakeError):
    """Upload exceeds the configured size limit."""

    error_code = "file_too_large"


class ExtractionServiceUnavailable(RfpIntakeError):
    """Primary extraction service could not produce text for the document."""

    error_code = "extraction_service_unavailable"


class ExtractionFailed(RfpIntakeError):
    """Both the primary extraction service and the local fallback failed."""

    error_code = "extraction_failed"

    def __init__(self, primary_error: str, fallback_error: str, rfp_id: str | None = None):
        message = f"Text extraction failed (primary: {primary_error}; fallback: {fallback_error})"
        details: dict[str, Any] = {
            "primary_error": primary_error,
            "fallback_error": fallback_error,
        }
        if rfp_id:
            details["rfp_id"] = rfp_id
        super().__init__(message, **details)
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        self.rfp_id = rfp_id


class AnalysisTransientFailure(RfpIntakeError):
    """Semantic analysis failed; the queue may retry."""

    error_code = "analysis_failed"


class OutputParsingError(AnalysisTransientFailure):
    """Analysis collaborator returned output that is not usable JSON."""

    error_code = "analysis_output_invalid"


class AnalysisPermanentFailure(RfpIntakeError):
    """Analysis retries are exhausted."""

    error_code = "analysis_permanently_failed"

    def __init__(self, rfp_id: str, attempts: int, last_error: str):
        super().__init__(last_error, rfp_id=rfp_id, attempts=attempts)
        self.rfp_id = rfp_id
        self.attempts = attempts
        self.last_error = last_error


class InvalidStateTransition(RfpIntakeError):
    """Requested RFP status change is not allowed."""

    error_code = "invalid_state_transition"

    def __init__(
        self,
        current: str,
        target: str,
        reason: str | None = None,
        message: str | None = None,
    ):
        if message is None:
            message = f"Cannot transition RFP from '{current}' to '{target}'"
            if reason:
                message = f"{message}: {reason}"
        super().__init__(message, current=current, target=target)
        self.current = current
        self.target = target


class AnalysisInProgress(InvalidStateTransition):
    """Re-trigger requested while the RFP is still processing."""

    error_code = "analysis_in_progress"

    def __init__(self, rfp_id: str):
        super().__init__(
            "processing",
            "processing",
            message="Analysis is already in progress for this RFP.",
        )
        self.rfp_id = rfp_id


class AnalysisNotReady(RfpIntakeError):
    """Analysis results were requested before the RFP was analyzed."""

    error_code = "analysis_not_ready"

    def __init__(self, rfp_id: str, status: str):
        super().__init__("RFP analysis not completed", rfp_id=rfp_id, status=status)
        self.rfp_id = rfp_id
        self.status = status


class RfpNotFound(RfpIntakeError):
    """No RFP record with the given id."""

    error_code = "rfp_not_found"

    def __init__(self, rfp_id: str):
        super().__init__(f"RFP not found: {rfp_id}", rfp_id=rfp_id)
        self.rfp_id = rfp_id


class AccessDenied(RfpIntakeError):
    """Caller's organization does not own the RFP."""

    error_code = "access_denied"


class AuthenticationError(RfpIntakeError):
    """Credentials are missing or invalid."""

    error_code = "authentication_failed"


def describe_error(error: BaseException) -> str:
    """Human-readable message for any exception."""
    if isinstance(error, RfpIntakeError):
        return error.message
    return str(error) or error.__class__.__name__
