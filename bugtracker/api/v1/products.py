"""Product endpoints: list and create."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bugtracker.core.database import get_db
from bugtracker.schemas.report import CreatedResponse, ProductCreate, ProductOut
from bugtracker.services import reports

router = APIRouter()


@router.get("", response_model=list[ProductOut])
def list_products(db: Annotated[Session, Depends(get_db)]) -> list[ProductOut]:
    return [ProductOut.model_validate(p) for p in reports.list_products(db)]


@router.post("", response_model=CreatedResponse)
def create_product(
    body: ProductCreate,
    db: Annotated[Session, Depends(get_db)],
) -> CreatedResponse:
    product = reports.create_product(db, body)
    return CreatedResponse(success=True, id=product.id)
