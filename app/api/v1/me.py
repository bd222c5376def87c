from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.session import get_session
from app.models.user import User
from app.schemas.user import UserOut, UserRoleOut
from app.services.auth_service import get_current_user
from app.services.role_service import list_roles
from app.services.user_service import to_user_out

router = APIRouter(prefix='/me', tags=['me'])


@router.get('', response_model=UserOut)
def get_me(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> UserOut:
    return to_user_out(session, user)


@router.get('/roles', response_model=list[UserRoleOut])
def list_my_roles(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
) -> list[UserRoleOut]:
    return [
        UserRoleOut(id=record.id, role=record.role, created_at=record.created_at)
        for record in list_roles(session, user.id)
    ]
