"""ORM models for bug reports and their discussion: comments, status changes, attachments."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from bugtracker.models.base import Base, JSONType

DEFAULT_STATUS = "Open"


class Report(Base):
    """A submitted defect report."""

    __tablename__ = "bugs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    issue_type = Column(String(64), nullable=True)
    severity = Column(String(32), nullable=True, index=True)
    status = Column(String(64), nullable=False, default=DEFAULT_STATUS, server_default=DEFAULT_STATUS)
    version = Column(String(128), nullable=True)
    device = Column(String(255), nullable=True)
    platform = Column(String(255), nullable=True)
    steps = Column(Text, nullable=True)
    actual_result = Column(Text, nullable=True)
    expected_result = Column(Text, nullable=True)
    tags = Column(JSONType, nullable=False, default=list)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True, index=True)
    reporter_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )


class Comment(Base):
    """Timeline source: a comment on a report."""

    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bug_id = Column(Integer, ForeignKey("bugs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )


class StatusChange(Base):
    """Timeline source: a transition of a report's status."""

    __tablename__ = "status_changes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bug_id = Column(Integer, ForeignKey("bugs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    old_status = Column(String(64), nullable=True)
    new_status = Column(String(64), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )


class Attachment(Base):
    """
    Metadata for a blob uploaded against a report. Immutable once written.

    storage_key addresses the blob in the blob store; the report references the
    attachment but does not own the blob.
    """

    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    bug_id = Column(Integer, ForeignKey("bugs.id"), nullable=False, index=True)
    file_name = Column(String(512), nullable=False)
    file_size = Column(Integer, nullable=False)
    file_type = Column(String(255), nullable=False, default="")
    storage_key = Column(String(1024), nullable=False, unique=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
