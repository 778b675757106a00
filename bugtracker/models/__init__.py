"""SQLAlchemy ORM models."""

from bugtracker.models.account import Account
from bugtracker.models.base import Base
from bugtracker.models.product import Product
from bugtracker.models.report import Attachment, Comment, Report, StatusChange

__all__ = ["Account", "Attachment", "Base", "Comment", "Product", "Report", "StatusChange"]
