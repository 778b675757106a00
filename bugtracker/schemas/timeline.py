"""Schemas for the merged report timeline (comments and status changes)."""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class CommentEvent(BaseModel):
    """A comment on the report."""

    type: Literal["comment"] = "comment"
    id: int
    bug_id: int
    user_id: int | None = None
    content: str
    created_at: datetime


class StatusChangeEvent(BaseModel):
    """A status transition of the report."""

    type: Literal["status_change"] = "status_change"
    id: int
    bug_id: int
    user_id: int | None = None
    old_status: str | None = None
    new_status: str
    created_at: datetime


TimelineEvent = Annotated[CommentEvent | StatusChangeEvent, Field(discriminator="type")]
