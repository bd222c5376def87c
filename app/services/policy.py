"""Row-level access rules for reports and roles.

Every rule is an SQL expression so it is evaluated by the database inside the
same statement that reads or writes the row. Application code never checks a
rule against a previously loaded copy of the row and then writes.

Read   : status = verified OR owner = caller OR caller is MODERATOR
Insert : owner = caller, status forced to pending (see app.db.triggers)
Update : (owner = caller AND status = pending) OR caller is MODERATOR
Review : caller is MODERATOR AND status = pending, target in {verified, rejected}
"""
from sqlalchemy import and_, exists, false, or_
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, select

from app.models.enums import AppRole, ReportStatus
from app.models.report import Report
from app.models.user_role import UserRole

ALLOWED_TRANSITIONS: dict[ReportStatus, frozenset[ReportStatus]] = {
    ReportStatus.PENDING: frozenset({ReportStatus.VERIFIED, ReportStatus.REJECTED}),
    ReportStatus.VERIFIED: frozenset(),
    ReportStatus.REJECTED: frozenset(),
}
TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)
REVIEW_TARGETS = ALLOWED_TRANSITIONS[ReportStatus.PENDING]


class AccessDenied(Exception):
    """A write matched no row the caller is allowed to touch.

    Raised both for rows that exist but fail the rule and for rows that do
    not exist, so callers cannot tell whether the row exists.
    """


def is_legal_transition(current: ReportStatus, target: ReportStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def role_clause(user_id: str, role: AppRole) -> ColumnElement[bool]:
    """EXISTS check over user_roles, embeddable in any report predicate."""
    if not user_id:
        return false()
    return exists().where(and_(UserRole.user_id == user_id, UserRole.role == role))


def has_role(session: Session, user_id: str, role: AppRole) -> bool:
    if not user_id:
        return False
    statement = select(UserRole.id).where((UserRole.user_id == user_id) & (UserRole.role == role))
    return session.exec(statement).first() is not None


def report_read_clause(user_id: str) -> ColumnElement[bool]:
    return or_(
        Report.status == ReportStatus.VERIFIED,
        Report.user_id == user_id,
        role_clause(user_id, AppRole.MODERATOR),
    )


def owner_update_clause(user_id: str) -> ColumnElement[bool]:
    return and_(Report.user_id == user_id, Report.status == ReportStatus.PENDING)


def moderator_update_clause(user_id: str) -> ColumnElement[bool]:
    return role_clause(user_id, AppRole.MODERATOR)


def report_update_clause(user_id: str) -> ColumnElement[bool]:
    return or_(owner_update_clause(user_id), moderator_update_clause(user_id))


def review_clause(user_id: str) -> ColumnElement[bool]:
    # status is re-checked here so that of two concurrent reviewers only the
    # first committed write matches the row
    return and_(moderator_update_clause(user_id), Report.status == ReportStatus.PENDING)


def role_read_clause(user_id: str) -> ColumnElement[bool]:
    return UserRole.user_id == user_id
