from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.db.init_db import init_db
from app.db.session import engine
from app.models.enums import AppRole, ReportCategory, ReportStatus
from app.models.report import Report
from app.models.user import User
from app.models.user_role import UserRole
from app.schemas.report import ReportCreate, ReportUpdate
from app.services import policy
from app.services.auth_service import create_user
from app.services.report_service import create_report, get_report, list_reports, review_report, update_report
from app.services.role_service import grant_role, list_roles


def _user(session: Session, moderator: bool = False) -> User:
    user = create_user(session, f"{uuid4()}@b.com", 'secret123')
    if moderator:
        grant_role(session, user.id, AppRole.MODERATOR)
    return user


def _report(session: Session, owner: User) -> Report:
    payload = ReportCreate(title='Burst main', category=ReportCategory.WATER_CUT, description='water everywhere')
    return create_report(session, owner.id, payload)


def _naive(value: datetime) -> datetime:
    return value.replace(tzinfo=None) if value.tzinfo else value


@pytest.fixture
def session():
    init_db(drop_all=True)
    with Session(engine) as db_session:
        yield db_session


def test_transition_table():
    assert policy.is_legal_transition(ReportStatus.PENDING, ReportStatus.VERIFIED)
    assert policy.is_legal_transition(ReportStatus.PENDING, ReportStatus.REJECTED)
    assert not policy.is_legal_transition(ReportStatus.PENDING, ReportStatus.PENDING)
    assert not policy.is_legal_transition(ReportStatus.REJECTED, ReportStatus.VERIFIED)
    assert not policy.is_legal_transition(ReportStatus.VERIFIED, ReportStatus.REJECTED)
    assert policy.TERMINAL_STATUSES == {ReportStatus.VERIFIED, ReportStatus.REJECTED}


def test_new_identity_gets_exactly_one_user_role(session):
    user = _user(session)
    roles = session.exec(select(UserRole).where(UserRole.user_id == user.id)).all()
    assert [record.role for record in roles] == [AppRole.USER]
    assert policy.has_role(session, user.id, AppRole.USER)
    assert not policy.has_role(session, user.id, AppRole.MODERATOR)
    assert not policy.has_role(session, '', AppRole.USER)


def test_duplicate_role_is_an_integrity_error(session):
    user = _user(session)
    with pytest.raises(ValueError):
        grant_role(session, user.id, AppRole.USER)

    session.add(UserRole(user_id=user.id, role=AppRole.USER))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()


def test_roles_are_readable_only_by_their_owner(session):
    user = _user(session)
    other = _user(session, moderator=True)
    assert [record.user_id for record in list_roles(session, user.id)] == [user.id]
    assert {record.user_id for record in list_roles(session, other.id)} == {other.id}


def test_insert_forces_pending_status(session):
    owner = _user(session)
    moderator = _user(session, moderator=True)
    record = Report(
        title='Sneaky',
        category=ReportCategory.OTHER,
        description='pre-approved',
        user_id=owner.id,
        status=ReportStatus.VERIFIED,
        verified_by=moderator.id,
        verified_at=datetime.now(timezone.utc),
    )
    session.add(record)
    session.commit()
    session.refresh(record)
    assert record.status == ReportStatus.PENDING
    assert record.verified_by is None
    assert record.verified_at is None


def test_updated_at_is_stamped_on_orm_updates(session):
    owner = _user(session)
    record = _report(session, owner)
    stale = datetime(2000, 1, 1, tzinfo=timezone.utc)

    record.location = 'Main St'
    record.updated_at = stale
    session.add(record)
    session.commit()
    session.refresh(record)
    assert _naive(record.updated_at) > _naive(stale) + timedelta(days=365)


def test_updated_at_is_stamped_on_bulk_updates(session):
    owner = _user(session)
    record = _report(session, owner)
    created = _naive(record.updated_at)
    stale = datetime(2000, 1, 1, tzinfo=timezone.utc)

    session.execute(
        update(Report)
        .where(Report.id == record.id)
        .values(location='Main St', updated_at=stale)
        .execution_options(synchronize_session=False)
    )
    session.commit()
    refreshed = session.get(Report, record.id, populate_existing=True)
    assert refreshed.location == 'Main St'
    assert _naive(refreshed.updated_at) >= created


def test_read_predicate(session):
    owner = _user(session)
    outsider = _user(session)
    moderator = _user(session, moderator=True)
    record = _report(session, owner)

    assert get_report(session, owner.id, record.id) is not None
    assert get_report(session, moderator.id, record.id) is not None
    assert get_report(session, outsider.id, record.id) is None
    assert list_reports(session, outsider.id) == []

    review_report(session, moderator.id, record.id, ReportStatus.VERIFIED)
    assert get_report(session, outsider.id, record.id) is not None


def test_owner_update_requires_pending(session):
    owner = _user(session)
    moderator = _user(session, moderator=True)
    record = _report(session, owner)

    updated = update_report(session, owner.id, record.id, ReportUpdate(title='Burst water main'))
    assert updated.title == 'Burst water main'

    review_report(session, moderator.id, record.id, ReportStatus.REJECTED)
    with pytest.raises(policy.AccessDenied):
        update_report(session, owner.id, record.id, ReportUpdate(title='Please reconsider'))


def test_empty_update_still_requires_edit_rights(session):
    owner = _user(session)
    outsider = _user(session)
    moderator = _user(session, moderator=True)
    record = _report(session, owner)

    assert update_report(session, owner.id, record.id, ReportUpdate()).id == record.id
    with pytest.raises(policy.AccessDenied):
        update_report(session, outsider.id, record.id, ReportUpdate(title=None))

    review_report(session, moderator.id, record.id, ReportStatus.VERIFIED)
    with pytest.raises(policy.AccessDenied):
        update_report(session, owner.id, record.id, ReportUpdate())
    assert update_report(session, moderator.id, record.id, ReportUpdate()).status == ReportStatus.VERIFIED


def test_null_for_required_field_is_ignored(session):
    owner = _user(session)
    record = _report(session, owner)
    updated = update_report(session, owner.id, record.id, ReportUpdate(title=None, location='Corner'))
    assert updated.title == 'Burst main'
    assert updated.location == 'Corner'


def test_review_stamps_reviewer_atomically(session):
    owner = _user(session)
    moderator = _user(session, moderator=True)
    record = _report(session, owner)

    reviewed = review_report(session, moderator.id, record.id, ReportStatus.VERIFIED)
    assert reviewed.status == ReportStatus.VERIFIED
    assert reviewed.verified_by == moderator.id
    assert reviewed.verified_at is not None


def test_second_reviewer_loses_race(session):
    owner = _user(session)
    first = _user(session, moderator=True)
    second = _user(session, moderator=True)
    record = _report(session, owner)

    with Session(engine) as other_session:
        stale_copy = other_session.get(Report, record.id)
        assert stale_copy.status == ReportStatus.PENDING

        review_report(session, first.id, record.id, ReportStatus.VERIFIED)

        with pytest.raises(policy.AccessDenied):
            review_report(other_session, second.id, record.id, ReportStatus.REJECTED)

    current = session.get(Report, record.id, populate_existing=True)
    assert current.status == ReportStatus.VERIFIED
    assert current.verified_by == first.id


def test_review_rejects_non_terminal_target(session):
    owner = _user(session)
    moderator = _user(session, moderator=True)
    record = _report(session, owner)
    with pytest.raises(ValueError):
        review_report(session, moderator.id, record.id, ReportStatus.PENDING)


def test_non_moderator_cannot_review(session):
    owner = _user(session)
    record = _report(session, owner)
    with pytest.raises(policy.AccessDenied):
        review_report(session, owner.id, record.id, ReportStatus.VERIFIED)


def test_owner_deletion_cascades_and_reviewer_deletion_nulls(session):
    owner = _user(session)
    moderator = _user(session, moderator=True)
    reviewed = _report(session, owner)
    review_report(session, moderator.id, reviewed.id, ReportStatus.VERIFIED)
    moderator_report = _report(session, moderator)
    report_id, moderator_report_id, owner_id = reviewed.id, moderator_report.id, owner.id

    session.delete(session.get(User, moderator.id))
    session.commit()
    session.expire_all()
    assert session.get(Report, report_id).verified_by is None
    assert session.get(Report, moderator_report_id) is None

    session.delete(session.get(User, owner_id))
    session.commit()
    session.expire_all()
    assert session.get(Report, report_id) is None
    assert session.exec(select(UserRole).where(UserRole.user_id == owner_id)).all() == []
