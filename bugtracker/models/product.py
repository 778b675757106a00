"""ORM model for products that bug reports are filed against."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, func

from bugtracker.models.base import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    icon_color = Column(String(32), nullable=True)
    image_url = Column(String(2048), nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
