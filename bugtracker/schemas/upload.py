"""Request/response schemas for attachment upload and listing."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UploadResponse(BaseModel):
    """Response after a blob and its metadata row were written."""

    success: bool = True
    key: str = Field(..., description="Storage key of the written blob.")


class AttachmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bug_id: int
    file_name: str
    file_size: int
    file_type: str
    storage_key: str
    created_at: datetime
