"""Profile and avatar updates for the authenticated account, plus the account list."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from bugtracker.api.v1.auth import get_current_principal
from bugtracker.api.v1.files import read_upload
from bugtracker.core.config import Settings, get_settings
from bugtracker.core.database import get_db
from bugtracker.core.storage import BlobStore, get_blob_store
from bugtracker.schemas.auth import (
    AccountOut,
    AvatarResponse,
    Principal,
    ProfileUpdate,
    SuccessResponse,
)
from bugtracker.services import accounts
from bugtracker.services.uploads import store_avatar

router = APIRouter()


@router.post("/user/profile", response_model=SuccessResponse)
def update_profile(
    body: ProfileUpdate,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Partial update of name and/or avatar_url; omitted fields keep their value."""
    accounts.update_profile(db, principal.account_id, name=body.name, avatar_url=body.avatar_url)
    return SuccessResponse(success=True)


@router.post("/user/avatar", response_model=AvatarResponse)
async def upload_avatar(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
    blobs: Annotated[BlobStore, Depends(get_blob_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AvatarResponse:
    """Store a multipart `file` as the account's avatar and return its URL."""
    payload = await read_upload(request)
    avatar_url = store_avatar(db, blobs, settings, principal.account_id, payload)
    return AvatarResponse(success=True, avatar_url=avatar_url)


@router.get("/users", response_model=list[AccountOut])
def list_users(db: Annotated[Session, Depends(get_db)]) -> list[AccountOut]:
    return [AccountOut.model_validate(a) for a in accounts.list_accounts(db)]
