"""Pydantic request/response schemas."""

from bugtracker.schemas.auth import (
    AccountOut,
    AvatarResponse,
    LoginRequest,
    LoginResponse,
    Principal,
    ProfileUpdate,
    RegisterRequest,
    SuccessResponse,
)
from bugtracker.schemas.health import HealthResponse
from bugtracker.schemas.report import (
    CommentCreate,
    CreatedResponse,
    ProductCreate,
    ProductOut,
    ReportCreate,
    ReportDetail,
    ReportSummary,
    StatusUpdate,
)
from bugtracker.schemas.timeline import CommentEvent, StatusChangeEvent, TimelineEvent
from bugtracker.schemas.upload import AttachmentOut, UploadResponse

__all__ = [
    "AccountOut",
    "AttachmentOut",
    "AvatarResponse",
    "CommentCreate",
    "CommentEvent",
    "CreatedResponse",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "Principal",
    "ProductCreate",
    "ProductOut",
    "ProfileUpdate",
    "RegisterRequest",
    "ReportCreate",
    "ReportDetail",
    "ReportSummary",
    "StatusChangeEvent",
    "StatusUpdate",
    "SuccessResponse",
    "TimelineEvent",
    "UploadResponse",
]
