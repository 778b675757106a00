"""Registration, login and the bearer-token auth dependency (get_current_principal)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bugtracker.core.database import get_db
from bugtracker.core.errors import Unauthorized
from bugtracker.core.security import create_access_token, decode_access_token
from bugtracker.schemas.auth import (
    AccountOut,
    LoginRequest,
    LoginResponse,
    Principal,
    RegisterRequest,
    SuccessResponse,
)
from bugtracker.services import accounts

logger = logging.getLogger(__name__)

router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    """
    Dependency: require a valid Bearer token and return the principal in its claims.

    Missing, malformed, forged and expired tokens all answer 401 Unauthorized;
    the specific reason is only logged. No database lookup: handlers that need
    current account fields re-fetch them.
    """
    if credentials is None:
        raise Unauthorized()
    try:
        payload = decode_access_token(credentials.credentials)
    except Unauthorized as e:
        logger.info("Rejected bearer token: %s", type(e).__name__)
        raise Unauthorized() from e
    try:
        account_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError) as e:
        logger.info("Rejected bearer token: invalid sub claim")
        raise Unauthorized() from e
    email = payload.get("email")
    if not isinstance(email, str):
        logger.info("Rejected bearer token: missing email claim")
        raise Unauthorized()
    return Principal(account_id=account_id, email=email)


@router.post("/register", response_model=SuccessResponse)
def register(
    body: RegisterRequest,
    db: Annotated[Session, Depends(get_db)],
) -> SuccessResponse:
    """Create an account. Answers 400 when a field is missing or the email is taken."""
    accounts.register(db, body.name, body.email, body.password)
    return SuccessResponse(success=True)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
) -> LoginResponse:
    """
    Authenticate with email and password; returns a signed token and the account.
    Include the token in the Authorization header as: Bearer <token>
    """
    account = accounts.authenticate(db, body.email, body.password)
    token = create_access_token(account.id, account.email)
    return LoginResponse(token=token, user=AccountOut.model_validate(account))


@router.get("/me", response_model=AccountOut)
def me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
) -> AccountOut:
    """Current account, re-read from storage (the token may predate profile changes)."""
    return AccountOut.model_validate(accounts.get_account(db, principal.account_id))
