"""Report endpoints: listing, detail, filing, attachments, discussion and timeline."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from bugtracker.api.v1.auth import get_current_principal
from bugtracker.api.v1.files import read_upload
from bugtracker.core.config import Settings, get_settings
from bugtracker.core.database import get_db
from bugtracker.core.storage import BlobStore, get_blob_store
from bugtracker.schemas.auth import Principal, SuccessResponse
from bugtracker.schemas.report import (
    CommentCreate,
    CreatedResponse,
    ReportCreate,
    ReportDetail,
    ReportSummary,
    StatusUpdate,
)
from bugtracker.schemas.timeline import TimelineEvent
from bugtracker.schemas.upload import AttachmentOut, UploadResponse
from bugtracker.services import reports
from bugtracker.services.timeline import build_timeline
from bugtracker.services.uploads import list_attachments, store_report_attachment

router = APIRouter()


@router.get("/bugs", response_model=list[ReportSummary])
def list_bugs(db: Annotated[Session, Depends(get_db)]) -> list[ReportSummary]:
    """All reports, newest first."""
    return reports.list_reports(db)


@router.post("/bugs", response_model=CreatedResponse)
def create_bug(
    body: ReportCreate,
    db: Annotated[Session, Depends(get_db)],
) -> CreatedResponse:
    report = reports.create_report(db, body)
    return CreatedResponse(success=True, id=report.id)


@router.get("/reports/{report_id}", response_model=ReportDetail)
def get_report(
    report_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> ReportDetail:
    return reports.get_report(db, report_id)


@router.get("/reports/{report_id}/timeline", response_model=list[TimelineEvent])
def get_timeline(
    report_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> list[TimelineEvent]:
    """
    Comments and status changes for the report in one ascending sequence.

    Each event carries `type` ("comment" or "status_change"). Events with the same
    timestamp list comments before status changes, then by id. An unknown report
    yields an empty list.
    """
    return build_timeline(db, report_id)


@router.get("/reports/{report_id}/attachments", response_model=list[AttachmentOut])
def get_attachments(
    report_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> list[AttachmentOut]:
    return [AttachmentOut.model_validate(a) for a in list_attachments(db, report_id)]


@router.post("/reports/{report_id}/upload", response_model=UploadResponse)
async def upload_attachment(
    report_id: int,
    request: Request,
    db: Annotated[Session, Depends(get_db)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> UploadResponse:
    """
    Attach a multipart `file` to the report.

    Rejected with 400 when larger than the upload limit (10 MiB by default) or
    when it is a video; nothing is stored in either case.
    """
    payload = await read_upload(request)
    attachment = store_report_attachment(db, blobs, settings, report_id, payload)
    return UploadResponse(success=True, key=attachment.storage_key)


@router.post("/reports/{report_id}/comments", response_model=CreatedResponse)
def add_comment(
    report_id: int,
    body: CommentCreate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> CreatedResponse:
    comment = reports.add_comment(db, report_id, principal.account_id, body.content)
    return CreatedResponse(success=True, id=comment.id)


@router.post("/reports/{report_id}/status", response_model=SuccessResponse)
def change_status(
    report_id: int,
    body: StatusUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Move the report to a new status; a no-op when the status is unchanged."""
    reports.change_status(db, report_id, principal.account_id, body.status)
    return SuccessResponse(success=True)
