"""Account registration, login verification and profile updates."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bugtracker.core.errors import DuplicateAccount, InvalidCredentials, NotFound, ValidationError
from bugtracker.core.security import (
    EMAIL_MAX_LEN,
    NAME_MAX_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    generate_salt,
    hash_password,
    verify_password,
)
from bugtracker.models import Account

logger = logging.getLogger(__name__)

MISSING_FIELDS = "Missing fields"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def register(
    db: Session,
    name: str | None,
    email: str | None,
    password: str | None,
    role: str = "user",
) -> int:
    """
    Create an account with a fresh salt and PBKDF2 hash; return its id.

    Uniqueness of email is left to the storage constraint: there is no pre-read,
    so two racing registrations resolve to one insert and one DuplicateAccount.
    """
    name = (name or "").strip()
    email = normalize_email(email or "")
    if not name or not email or not password:
        raise ValidationError(MISSING_FIELDS)
    if len(name) > NAME_MAX_LEN or len(email) > EMAIL_MAX_LEN:
        raise ValidationError("Invalid name or email length.")
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise ValidationError("Invalid password length.")

    salt = generate_salt()
    account = Account(
        name=name,
        email=email,
        password_hash=hash_password(password, salt),
        salt=salt,
        role=role,
    )
    db.add(account)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Registration rejected: email already registered")
        raise DuplicateAccount(cause=e) from e
    db.refresh(account)
    logger.info("Registered account id=%s", account.id)
    return account.id


def authenticate(db: Session, email: str, password: str) -> Account:
    """
    Return the active account matching email and password.

    Every failure (unknown email, inactive account, no credential material,
    wrong password) raises the same InvalidCredentials.
    """
    email = normalize_email(email or "")
    account = None
    if email:
        account = (
            db.query(Account)
            .filter(Account.email == email, Account.is_active.is_(True))
            .first()
        )
    if account is None or not account.password_hash:
        # Same derivation cost as a real check so response time does not reveal the email.
        hash_password(password or "", generate_salt())
        raise InvalidCredentials()
    if not verify_password(password or "", account.salt, account.password_hash):
        raise InvalidCredentials()
    return account


def get_account(db: Session, account_id: int) -> Account:
    account = db.query(Account).filter(Account.id == account_id).first()
    if account is None:
        raise NotFound("User not found")
    return account


def update_profile(
    db: Session,
    account_id: int,
    name: str | None = None,
    avatar_url: str | None = None,
) -> None:
    """Partial update: only fields that are not None are written."""
    values: dict[str, str] = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Name must not be empty.")
        values["name"] = name.strip()
    if avatar_url is not None:
        values["avatar_url"] = avatar_url
    if not values:
        return
    db.query(Account).filter(Account.id == account_id).update(values, synchronize_session=False)
    db.commit()


def list_accounts(db: Session) -> list[Account]:
    return db.query(Account).order_by(Account.created_at.desc(), Account.id.desc()).all()
