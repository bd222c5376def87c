from sqlmodel import Session, select

from app.models.user import User
from app.schemas.user import UserOut
from app.services.role_service import role_names


def to_user_out(session: Session, user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        is_active=user.is_active,
        roles=role_names(session, user.id),
    )


def get_user_by_email(session: Session, email: str):
    return session.exec(select(User).where(User.email == email)).first()
