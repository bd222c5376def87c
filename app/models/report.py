from datetime import datetime
from typing import Optional
from sqlalchemy import Column, ForeignKey, Text
from sqlmodel import Field, SQLModel
from sqlmodel.sql.sqltypes import AutoString
from app.models.base import IDModel, TimestampModel, timestamp_type
from app.models.enums import ReportCategory, ReportStatus, enum_column

TITLE_MAX_LEN = 200
DESCRIPTION_MAX_LEN = 2000
LOCATION_MAX_LEN = 500


class Report(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'reports'

    title: str = Field(max_length=TITLE_MAX_LEN)
    category: ReportCategory = Field(sa_column=enum_column(ReportCategory, 'report_category'))
    description: str = Field(sa_type=Text)
    location: Optional[str] = Field(default=None, sa_type=Text)
    image_url: Optional[str] = Field(default=None, sa_type=Text)
    status: ReportStatus = Field(
        default=ReportStatus.PENDING,
        sa_column=enum_column(ReportStatus, 'report_status', index=True, server_default=ReportStatus.PENDING.value),
    )
    user_id: str = Field(
        sa_column=Column(AutoString, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
    )
    verified_by: Optional[str] = Field(
        default=None,
        sa_column=Column(AutoString, ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
    )
    verified_at: Optional[datetime] = Field(default=None, sa_type=timestamp_type())
