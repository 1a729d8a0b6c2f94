"""API routes for RFP Intake."""

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status
from pydantic import ValidationError

from rfp_intake.api.dependencies import AnalysisServiceDep, ContainerDep, IdentityDep, UploadServiceDep
from rfp_intake.errors import UnsupportedFormat
from rfp_intake.models.requests import TriggerAnalysisRequest, UploadMetadata
from rfp_intake.models.responses import (
    HealthResponse,
    QueueStatsResponse,
    RfpStatusResponse,
    RubricResponse,
    TriggerAnalysisResponse,
    UploadResponse,
)

router = APIRouter(prefix="/api/v1", tags=["RFP Intake"])


@router.get("/health", response_model=HealthResponse)
def health_check(container: ContainerDep) -> HealthResponse:
    """Health check endpoint, with the primary extraction service status."""
    return HealthResponse(status="healthy", extraction_service=container.extraction_engine.service_status())


@router.post(
    "/rfps/upload",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
)
def upload_rfp(
    response: Response,
    identity: IdentityDep,
    uploads: UploadServiceDep,
    rfp_document: Annotated[UploadFile, File(alias="rfpDocument")],
    client_name: Annotated[str | None, Form(alias="clientName")] = None,
    title: Annotated[str | None, Form()] = None,
    due_date: Annotated[str | None, Form(alias="dueDate")] = None,
    description: Annotated[str | None, Form()] = None,
) -> UploadResponse:
    """Upload an RFP document.

    Returns 201 for a new RFP and 200 when the same organization already
    uploaded identical content.
    """
    try:
        metadata = UploadMetadata.model_validate(
            {
                "clientName": client_name or "",
                "title": title,
                "dueDate": due_date or None,
                "description": description,
            }
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=[{"field": ".".join(map(str, err["loc"])), "message": err["msg"]} for err in e.errors()],
        ) from e

    if not rfp_document.filename:
        raise UnsupportedFormat("No file uploaded")

    staged = uploads.stage(rfp_document.file, rfp_document.filename)
    result = uploads.ingest(
        staged,
        rfp_document.filename,
        metadata,
        organization_id=identity.organization_id,
        uploaded_by_id=identity.user_id,
        mime_type=rfp_document.content_type,
    )
    if result.duplicate:
        response.status_code = status.HTTP_200_OK
    return result


@router.get("/rfps/queue/stats", response_model=QueueStatsResponse)
def get_queue_stats(identity: IdentityDep, service: AnalysisServiceDep) -> QueueStatsResponse:
    """Analysis queue counters."""
    return service.queue_stats()


@router.get("/rfps/{rfp_id}/status", response_model=RfpStatusResponse, response_model_exclude_none=True)
def get_rfp_status(rfp_id: str, identity: IdentityDep, service: AnalysisServiceDep) -> RfpStatusResponse:
    """Current lifecycle status and progress of an RFP."""
    return service.get_status(rfp_id, identity.organization_id)


@router.post(
    "/rfps/{rfp_id}/analyze",
    response_model=TriggerAnalysisResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_202_ACCEPTED,
)
def trigger_analysis(
    rfp_id: str,
    response: Response,
    identity: IdentityDep,
    service: AnalysisServiceDep,
    request: TriggerAnalysisRequest | None = None,
) -> TriggerAnalysisResponse:
    """Queue an RFP for analysis, or re-analysis with ``reanalyze``."""
    request = request or TriggerAnalysisRequest()
    result = service.trigger_analysis(
        rfp_id,
        identity.organization_id,
        priority=request.priority,
        reanalyze=request.reanalyze,
    )
    if not result.queued:
        response.status_code = status.HTTP_200_OK
    return result


@router.get("/rfps/{rfp_id}/analysis", response_model=RfpStatusResponse, response_model_exclude_none=True)
def get_analysis(rfp_id: str, identity: IdentityDep, service: AnalysisServiceDep) -> RfpStatusResponse:
    """Analysis results with extraction details."""
    return service.get_analysis(rfp_id, identity.organization_id)


@router.get("/rfps/{rfp_id}/rubric", response_model=RubricResponse)
def get_rubric(rfp_id: str, identity: IdentityDep, service: AnalysisServiceDep) -> RubricResponse:
    """Evaluation rubric of an analyzed RFP."""
    return service.get_rubric(rfp_id, identity.organization_id)


@router.delete("/rfps/{rfp_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rfp(rfp_id: str, identity: IdentityDep, service: AnalysisServiceDep) -> Response:
    """Soft-delete an RFP."""
    service.delete_rfp(rfp_id, identity.organization_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
