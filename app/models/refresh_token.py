from datetime import datetime
from sqlalchemy import Column, ForeignKey
from sqlmodel import Field, SQLModel
from sqlmodel.sql.sqltypes import AutoString
from app.models.base import IDModel, TimestampModel


class RefreshToken(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'refresh_tokens'

    token: str = Field(index=True, unique=True, sa_type=AutoString(512))
    user_id: str = Field(
        sa_column=Column(AutoString, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
    )
    expires_at: datetime
