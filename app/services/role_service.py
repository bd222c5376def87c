from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select
from app.models.enums import AppRole
from app.models.user_role import UserRole
from app.services import policy
from app.services.change_feed import USER_ROLES, change_feed


def list_roles(session: Session, viewer_id: str) -> list[UserRole]:
    statement = select(UserRole).where(policy.role_read_clause(viewer_id)).order_by(UserRole.created_at)
    return list(session.exec(statement).all())


def role_names(session: Session, user_id: str) -> list[AppRole]:
    return [record.role for record in list_roles(session, user_id)]


def grant_role(session: Session, user_id: str, role: AppRole) -> UserRole:
    """Administrative grant. A second grant of the same role is an integrity error."""
    record = UserRole(user_id=user_id, role=role)
    session.add(record)
    try:
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.warning('role.grant_failed', user_id=user_id, role=role.value)
        raise ValueError('Role already granted') from exc
    session.refresh(record)
    logger.info('role.granted', user_id=user_id, role=role.value)
    change_feed.publish(USER_ROLES, 'INSERT', record.id)
    return record
