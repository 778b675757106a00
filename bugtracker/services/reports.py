"""Report, product and discussion storage operations."""

import logging

from sqlalchemy.orm import Session, aliased

from bugtracker.core.errors import NotFound, ValidationError
from bugtracker.models import Account, Comment, Product, Report, StatusChange
from bugtracker.models.report import DEFAULT_STATUS
from bugtracker.schemas.report import ProductCreate, ReportCreate, ReportDetail, ReportSummary

logger = logging.getLogger(__name__)


def _report_query(db: Session):
    reporter = aliased(Account)
    return (
        db.query(
            Report,
            Product.name.label("product_name"),
            Product.icon_color.label("product_color"),
            Product.image_url.label("product_image"),
            reporter.name.label("reporter_name"),
            reporter.avatar_url.label("reporter_avatar"),
            reporter.role.label("reporter_role"),
        )
        .outerjoin(Product, Report.product_id == Product.id)
        .outerjoin(reporter, Report.reporter_id == reporter.id)
    )


def _fields(report: Report) -> dict:
    return {
        column.name: getattr(report, column.name)
        for column in Report.__table__.columns
    } | {"tags": list(report.tags or [])}


def list_reports(db: Session) -> list[ReportSummary]:
    """All reports, newest first, with product and reporter display names."""
    rows = _report_query(db).order_by(Report.created_at.desc(), Report.id.desc()).all()
    return [
        ReportSummary(
            **_fields(row.Report),
            product_name=row.product_name,
            product_color=row.product_color,
            reporter_name=row.reporter_name,
        )
        for row in rows
    ]


def get_report(db: Session, report_id: int) -> ReportDetail:
    row = _report_query(db).filter(Report.id == report_id).first()
    if row is None:
        raise NotFound("Report not found")
    return ReportDetail(
        **_fields(row.Report),
        product_name=row.product_name,
        product_color=row.product_color,
        product_image=row.product_image,
        reporter_name=row.reporter_name,
        reporter_avatar=row.reporter_avatar,
        reporter_role=row.reporter_role,
    )


def create_report(db: Session, body: ReportCreate) -> Report:
    data = body.model_dump()
    data["status"] = data.get("status") or DEFAULT_STATUS
    report = Report(**data)
    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info("Created report id=%s", report.id)
    return report


def _require_report(db: Session, report_id: int) -> Report:
    report = db.query(Report).filter(Report.id == report_id).first()
    if report is None:
        raise NotFound("Report not found")
    return report


def add_comment(db: Session, report_id: int, author_id: int, content: str) -> Comment:
    _require_report(db, report_id)
    comment = Comment(bug_id=report_id, user_id=author_id, content=content)
    db.add(comment)
    db.commit()
    db.refresh(comment)
    return comment


def change_status(db: Session, report_id: int, author_id: int, new_status: str) -> StatusChange | None:
    """
    Move the report to new_status and record the transition.

    Returns None without recording anything when the status is unchanged.
    A blank status is rejected before the report is looked up.
    """
    new_status = (new_status or "").strip()
    if not new_status:
        raise ValidationError("Status is required")
    report = _require_report(db, report_id)
    if report.status == new_status:
        return None
    change = StatusChange(
        bug_id=report_id,
        user_id=author_id,
        old_status=report.status,
        new_status=new_status,
    )
    report.status = new_status
    db.add(change)
    db.commit()
    db.refresh(change)
    logger.info(
        "Report id=%s status %s -> %s by account id=%s",
        report_id,
        change.old_status,
        change.new_status,
        author_id,
    )
    return change


def list_products(db: Session) -> list[Product]:
    return db.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()


def create_product(db: Session, body: ProductCreate) -> Product:
    product = Product(**body.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product
