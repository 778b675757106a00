"""Request/response schemas for reports, products and discussion."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReportCreate(BaseModel):
    """Fields accepted when filing a report."""

    title: str = Field(..., min_length=1, max_length=512)
    description: str | None = None
    issue_type: str | None = None
    severity: str | None = None
    status: str | None = None
    version: str | None = None
    device: str | None = None
    platform: str | None = None
    steps: str | None = None
    actual_result: str | None = None
    expected_result: str | None = None
    tags: list[str] = Field(default_factory=list)
    product_id: int | None = None
    reporter_id: int | None = None


class ReportSummary(BaseModel):
    """Report row joined with product and reporter display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    issue_type: str | None = None
    severity: str | None = None
    status: str
    version: str | None = None
    device: str | None = None
    platform: str | None = None
    steps: str | None = None
    actual_result: str | None = None
    expected_result: str | None = None
    tags: list[str] = Field(default_factory=list)
    product_id: int | None = None
    reporter_id: int | None = None
    created_at: datetime
    product_name: str | None = None
    product_color: str | None = None
    reporter_name: str | None = None


class ReportDetail(ReportSummary):
    product_image: str | None = None
    reporter_avatar: str | None = None
    reporter_role: str | None = None


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1)


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1, max_length=64)


class CreatedResponse(BaseModel):
    success: bool = True
    id: int


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    owner_id: int | None = None
    icon_color: str | None = None
    image_url: str | None = None


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    owner_id: int | None = None
    icon_color: str | None = None
    image_url: str | None = None
    created_at: datetime
