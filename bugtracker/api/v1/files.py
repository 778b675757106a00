"""Serving stored blobs and reading multipart uploads."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, UploadFile

from bugtracker.core.errors import NotFound, ValidationError
from bugtracker.core.storage import BlobStore, get_blob_store
from bugtracker.services.uploads import UploadPayload

router = APIRouter()


def _is_upload_file(obj: object) -> bool:
    """True if obj is an uploaded file (UploadFile or file-like with filename and read)."""
    if isinstance(obj, UploadFile):
        return True
    return (
        hasattr(obj, "read")
        and callable(getattr(obj, "read", None))
        and hasattr(obj, "filename")
    )


async def read_upload(request: Request, field: str = "file") -> UploadPayload:
    """Read the multipart `file` part into an UploadPayload. 400 when absent."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type != "multipart/form-data":
        raise ValidationError("No file provided")
    form = await request.form()
    file = form.get(field)
    if file is None or not _is_upload_file(file):
        raise ValidationError("No file provided")
    data = await file.read()
    declared = getattr(file, "size", None)
    return UploadPayload(
        file_name=getattr(file, "filename", None) or "",
        content_type=getattr(file, "content_type", None) or "application/octet-stream",
        size=declared if declared is not None else len(data),
        data=data,
    )


@router.get("/files/{key:path}")
def get_file(
    key: str,
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
) -> Response:
    """Stream a stored blob with its content type and etag."""
    try:
        stored = blobs.get(key)
    except ValueError:
        stored = None
    if stored is None:
        raise NotFound("File not found")
    return Response(
        content=stored.body,
        media_type=stored.content_type,
        headers={"etag": stored.etag},
    )
