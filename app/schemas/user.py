from datetime import datetime
from pydantic import BaseModel, EmailStr
from app.models.enums import AppRole


class UserOut(BaseModel):
    id: str
    email: EmailStr
    is_active: bool
    roles: list[AppRole]


class UserRoleOut(BaseModel):
    id: str
    role: AppRole
    created_at: datetime
