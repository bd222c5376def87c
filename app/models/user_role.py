from sqlalchemy import Column, ForeignKey, UniqueConstraint
from sqlmodel import Field, SQLModel
from sqlmodel.sql.sqltypes import AutoString
from app.models.base import CreatedAtModel, IDModel
from app.models.enums import AppRole, enum_column


class UserRole(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'user_roles'
    __table_args__ = (UniqueConstraint('user_id', 'role', name='uq_user_roles_user_role'),)

    user_id: str = Field(
        sa_column=Column(AutoString, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
    )
    role: AppRole = Field(
        default=AppRole.USER,
        sa_column=enum_column(AppRole, 'app_role', server_default=AppRole.USER.value),
    )
