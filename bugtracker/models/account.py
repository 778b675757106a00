"""ORM model for user accounts (identity and credential material)."""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, func, true

from bugtracker.models.base import Base


class Account(Base):
    """
    Registered account. Email is the natural key and is unique at the storage layer.

    password_hash and salt are opaque outside bugtracker.core.security and are
    NULL for accounts created without a password. role: 'admin' or 'user'.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=True)
    salt = Column(String(64), nullable=True)
    role = Column(String(32), nullable=False, default="user", server_default="user")
    avatar_url = Column(String(2048), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
