"""Row bookkeeping that must hold no matter which code path writes the row."""
from uuid import uuid4

from sqlalchemy import event
from sqlmodel import Session

from app.models.base import _utc_now
from app.models.enums import AppRole, ReportStatus
from app.models.report import Report
from app.models.user import User
from app.models.user_role import UserRole


@event.listens_for(Report, 'before_insert')
def force_pending_on_insert(mapper, connection, target: Report) -> None:
    target.status = ReportStatus.PENDING
    target.verified_by = None
    target.verified_at = None


@event.listens_for(Report, 'before_update')
def touch_report_updated_at(mapper, connection, target: Report) -> None:
    target.updated_at = _utc_now()


@event.listens_for(Session, 'do_orm_execute')
def touch_bulk_report_updates(orm_execute_state) -> None:
    if not orm_execute_state.is_update:
        return
    statement = orm_execute_state.statement
    table = getattr(statement, 'table', None)
    if getattr(table, 'name', None) != Report.__tablename__:
        return
    orm_execute_state.statement = statement.values(updated_at=_utc_now())


@event.listens_for(User, 'after_insert')
def grant_default_role(mapper, connection, target: User) -> None:
    connection.execute(
        UserRole.__table__.insert().values(
            id=str(uuid4()),
            user_id=target.id,
            role=AppRole.USER,
            created_at=_utc_now(),
        )
    )
