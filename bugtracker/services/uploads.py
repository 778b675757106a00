"""
Gated ingestion of uploaded files: report attachments and account avatars.

Validation runs before any write. On success the blob is written first and the
metadata second; the two writes are not transactional, so a failed metadata
write leaves an orphaned blob (reclaimed by bugtracker.services.orphans).
"""

import logging
import time
from dataclasses import dataclass
from pathlib import PurePosixPath, PureWindowsPath
from typing import TYPE_CHECKING
from urllib.parse import quote

from sqlalchemy.orm import Session

from bugtracker.core.errors import NotFound, PayloadTooLarge, UnsupportedMediaType
from bugtracker.core.storage import BlobStore
from bugtracker.models import Account, Attachment, Report

if TYPE_CHECKING:
    from bugtracker.core.config import Settings

logger = logging.getLogger(__name__)

ATTACHMENTS_PREFIX = "attachments"
AVATARS_PREFIX = "avatars"
DEFAULT_FILE_NAME = "upload"
# UTF-8 bytes; keeps "<ms>_<name>" well under the usual 255-byte filesystem limit.
MAX_FILE_NAME_BYTES = 100
MAX_SUFFIX_BYTES = 16


@dataclass(frozen=True)
class UploadPayload:
    """A named binary payload with its declared size and MIME type."""

    file_name: str
    content_type: str
    size: int
    data: bytes


def validate_upload(payload: UploadPayload, settings: "Settings") -> None:
    """Apply size then media-type policy. Raises before anything is written."""
    if payload.size > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise PayloadTooLarge(f"File too large (> {limit_mb}MB)")
    content_type = (payload.content_type or "").strip().lower()
    if content_type.startswith("video/") or content_type in settings.FORBIDDEN_MIME_TYPES:
        raise UnsupportedMediaType("Video files are not allowed")


def safe_file_name(file_name: str | None) -> str:
    """
    Last path component of a client-supplied name, with separators stripped.

    Names longer than MAX_FILE_NAME_BYTES (UTF-8) are cut down, keeping a short extension.
    """
    name = PureWindowsPath(PurePosixPath(file_name or "").name).name.strip()
    if name in ("", ".", ".."):
        return DEFAULT_FILE_NAME
    if len(name.encode("utf-8")) > MAX_FILE_NAME_BYTES:
        suffix = PurePosixPath(name).suffix
        if len(suffix.encode("utf-8")) > MAX_SUFFIX_BYTES:
            suffix = ""
        stem = name[: len(name) - len(suffix)]
        budget = MAX_FILE_NAME_BYTES - len(suffix.encode("utf-8"))
        stem = stem.encode("utf-8")[:budget].decode("utf-8", "ignore").rstrip()
        name = (stem or DEFAULT_FILE_NAME) + suffix
    return name


def build_storage_key(scope: str, file_name: str, now_ms: int | None = None) -> str:
    """Key namespaced by scope with a millisecond timestamp discriminator."""
    stamp = now_ms if now_ms is not None else time.time_ns() // 1_000_000
    return f"{scope}/{stamp}_{safe_file_name(file_name)}"


def store_report_attachment(
    db: Session,
    blobs: BlobStore,
    settings: "Settings",
    report_id: int,
    payload: UploadPayload,
) -> Attachment:
    """Validate, write the blob, then insert the attachment row. Returns the row."""
    validate_upload(payload, settings)
    if db.query(Report.id).filter(Report.id == report_id).first() is None:
        raise NotFound("Report not found")

    key = build_storage_key(f"{ATTACHMENTS_PREFIX}/{report_id}", payload.file_name)
    blobs.put(key, payload.data, payload.content_type)

    attachment = Attachment(
        bug_id=report_id,
        file_name=safe_file_name(payload.file_name),
        file_size=payload.size,
        file_type=payload.content_type or "",
        storage_key=key,
    )
    db.add(attachment)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Attachment metadata insert failed; orphaned blob key=%s", key)
        raise
    db.refresh(attachment)
    logger.info(
        "Stored attachment report_id=%s key=%s bytes=%s type=%s",
        report_id,
        key,
        payload.size,
        payload.content_type,
    )
    return attachment


def store_avatar(
    db: Session,
    blobs: BlobStore,
    settings: "Settings",
    account_id: int,
    payload: UploadPayload,
) -> str:
    """Validate, write the avatar blob, then point the account at it. Returns the avatar URL."""
    validate_upload(payload, settings)

    key = build_storage_key(f"{AVATARS_PREFIX}/{account_id}", payload.file_name)
    blobs.put(key, payload.data, payload.content_type)

    avatar_url = f"{settings.API_PREFIX}/files/{quote(key)}"
    try:
        updated = (
            db.query(Account)
            .filter(Account.id == account_id)
            .update({"avatar_url": avatar_url}, synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Avatar update failed; orphaned blob key=%s", key)
        raise
    if not updated:
        logger.warning("Avatar stored for missing account id=%s; orphaned blob key=%s", account_id, key)
        raise NotFound("User not found")
    logger.info("Stored avatar account_id=%s key=%s", account_id, key)
    return avatar_url


def list_attachments(db: Session, report_id: int) -> list[Attachment]:
    return (
        db.query(Attachment)
        .filter(Attachment.bug_id == report_id)
        .order_by(Attachment.created_at, Attachment.id)
        .all()
    )
