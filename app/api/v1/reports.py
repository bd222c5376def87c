from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session
from app.db.session import get_session
from app.models.enums import ReportCategory, ReportStatus
from app.models.report import Report
from app.models.user import User
from app.schemas.report import ReportCreate, ReportOut, ReportReview, ReportStats, ReportUpdate
from app.services.auth_service import get_current_user, require_moderator
from app.services.policy import AccessDenied
from app.services.report_service import (
    create_report,
    get_report,
    list_reports,
    report_stats,
    review_report,
    update_report,
)

router = APIRouter(prefix='/reports', tags=['reports'])


def _to_report_out(record: Report) -> ReportOut:
    return ReportOut(
        id=record.id,
        title=record.title,
        category=record.category,
        description=record.description,
        location=record.location,
        image_url=record.image_url,
        status=record.status,
        user_id=record.user_id,
        verified_by=record.verified_by,
        verified_at=record.verified_at,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _not_allowed() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Not allowed')


@router.post('', response_model=ReportOut, status_code=status.HTTP_201_CREATED)
def create_report_endpoint(
    payload: ReportCreate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportOut:
    record = create_report(session, user.id, payload)
    return _to_report_out(record)


@router.get('', response_model=list[ReportOut])
def list_reports_endpoint(
    status: Optional[ReportStatus] = None,
    category: Optional[ReportCategory] = None,
    mine: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[ReportOut]:
    reports = list_reports(
        session,
        user.id,
        status=status,
        category=category,
        mine=mine,
        limit=limit,
        offset=offset,
    )
    return [_to_report_out(record) for record in reports]


@router.get('/stats', response_model=ReportStats)
def report_stats_endpoint(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportStats:
    return report_stats(session, user.id)


@router.get('/{report_id}', response_model=ReportOut)
def get_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportOut:
    record = get_report(session, user.id, report_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Report not found')
    return _to_report_out(record)


@router.patch('/{report_id}', response_model=ReportOut)
def update_report_endpoint(
    report_id: str,
    payload: ReportUpdate,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> ReportOut:
    try:
        record = update_report(session, user.id, report_id, payload)
    except AccessDenied as exc:
        raise _not_allowed() from exc
    return _to_report_out(record)


def _review(session: Session, user: User, report_id: str, target: ReportStatus) -> ReportOut:
    try:
        record = review_report(session, user.id, report_id, target)
    except AccessDenied as exc:
        raise _not_allowed() from exc
    return _to_report_out(record)


@router.post('/{report_id}/review', response_model=ReportOut)
def review_report_endpoint(
    report_id: str,
    payload: ReportReview,
    session: Session = Depends(get_session),
    user: User = Depends(require_moderator),
) -> ReportOut:
    return _review(session, user, report_id, payload.status)


@router.post('/{report_id}/verify', response_model=ReportOut)
def verify_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(require_moderator),
) -> ReportOut:
    return _review(session, user, report_id, ReportStatus.VERIFIED)


@router.post('/{report_id}/reject', response_model=ReportOut)
def reject_report_endpoint(
    report_id: str,
    session: Session = Depends(get_session),
    user: User = Depends(require_moderator),
) -> ReportOut:
    return _review(session, user, report_id, ReportStatus.REJECTED)
