from typing import Optional
from loguru import logger
from sqlalchemy import func, update
from sqlmodel import Session, select
from app.models.base import _utc_now
from app.models.enums import ReportCategory, ReportStatus
from app.models.report import Report
from app.schemas.report import ReportCreate, ReportStats, ReportUpdate
from app.services import policy
from app.services.change_feed import REPORTS, change_feed

NON_NULLABLE_FIELDS = frozenset({'title', 'category', 'description'})


def create_report(session: Session, user_id: str, payload: ReportCreate) -> Report:
    record = Report(
        user_id=user_id,
        title=payload.title,
        category=payload.category,
        description=payload.description,
        location=payload.location,
        image_url=payload.image_url,
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    logger.info('report.created', report_id=record.id, user_id=user_id, category=record.category.value)
    change_feed.publish(REPORTS, 'INSERT', record.id)
    return record


def list_reports(
    session: Session,
    viewer_id: str,
    status: Optional[ReportStatus] = None,
    category: Optional[ReportCategory] = None,
    mine: bool = False,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> list[Report]:
    statement = select(Report).where(policy.report_read_clause(viewer_id))
    if status is not None:
        statement = statement.where(Report.status == status)
    if category is not None:
        statement = statement.where(Report.category == category)
    if mine:
        statement = statement.where(Report.user_id == viewer_id)
    statement = statement.order_by(Report.created_at.desc(), Report.id)
    if offset:
        statement = statement.offset(offset)
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def get_report(session: Session, viewer_id: str, report_id: str) -> Optional[Report]:
    statement = select(Report).where((Report.id == report_id) & policy.report_read_clause(viewer_id))
    return session.exec(statement).first()


def report_stats(session: Session, viewer_id: str) -> ReportStats:
    statement = (
        select(Report.status, func.count(Report.id))
        .where(policy.report_read_clause(viewer_id))
        .group_by(Report.status)
    )
    counts = {ReportStatus(status): int(count) for status, count in session.exec(statement).all()}
    return ReportStats(
        total=sum(counts.values()),
        pending=counts.get(ReportStatus.PENDING, 0),
        verified=counts.get(ReportStatus.VERIFIED, 0),
        rejected=counts.get(ReportStatus.REJECTED, 0),
    )


def _apply_update(session: Session, report_id: str, predicate, values: dict) -> bool:
    statement = (
        update(Report)
        .where((Report.id == report_id) & predicate)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(statement)
    if result.rowcount != 1:
        session.rollback()
        return False
    session.commit()
    return True


def update_report(session: Session, actor_id: str, report_id: str, payload: ReportUpdate) -> Report:
    data = payload.model_dump(exclude_unset=True)
    values = {key: value for key, value in data.items() if value is not None or key not in NON_NULLABLE_FIELDS}
    if not values:
        statement = select(Report.id).where((Report.id == report_id) & policy.report_update_clause(actor_id))
        if session.exec(statement).first() is None:
            logger.info('report.update_denied', report_id=report_id, user_id=actor_id)
            raise policy.AccessDenied(report_id)
        return session.get(Report, report_id)
    if not _apply_update(session, report_id, policy.report_update_clause(actor_id), values):
        logger.info('report.update_denied', report_id=report_id, user_id=actor_id)
        raise policy.AccessDenied(report_id)
    record = session.get(Report, report_id, populate_existing=True)
    logger.info('report.updated', report_id=report_id, user_id=actor_id, fields=sorted(values))
    change_feed.publish(REPORTS, 'UPDATE', report_id)
    return record


def review_report(session: Session, moderator_id: str, report_id: str, status: ReportStatus) -> Report:
    """Move a pending report to a terminal status, stamping the reviewer in the same statement."""
    if status not in policy.REVIEW_TARGETS:
        raise ValueError(f'Cannot transition a report to {status.value}')
    values = {
        'status': status,
        'verified_by': moderator_id,
        'verified_at': _utc_now(),
    }
    if not _apply_update(session, report_id, policy.review_clause(moderator_id), values):
        logger.info('report.review_denied', report_id=report_id, user_id=moderator_id, status=status.value)
        raise policy.AccessDenied(report_id)
    record = session.get(Report, report_id, populate_existing=True)
    logger.info('report.reviewed', report_id=report_id, user_id=moderator_id, status=status.value)
    change_feed.publish(REPORTS, 'UPDATE', report_id)
    return record
