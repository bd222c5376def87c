from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.models.enums import ReportCategory, ReportStatus
from app.models.report import DESCRIPTION_MAX_LEN, LOCATION_MAX_LEN, TITLE_MAX_LEN
from app.services.policy import REVIEW_TARGETS


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ReportCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LEN)
    category: ReportCategory
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LEN)
    location: Optional[str] = Field(default=None, max_length=LOCATION_MAX_LEN)
    image_url: Optional[str] = None

    @field_validator('location', 'image_url', mode='before')
    @classmethod
    def blank_optional_to_none(cls, value):
        return _blank_to_none(value)


class ReportUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra='forbid')

    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LEN)
    category: Optional[ReportCategory] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=DESCRIPTION_MAX_LEN)
    location: Optional[str] = Field(default=None, max_length=LOCATION_MAX_LEN)
    image_url: Optional[str] = None

    @field_validator('location', 'image_url', mode='before')
    @classmethod
    def blank_optional_to_none(cls, value):
        return _blank_to_none(value)


class ReportReview(BaseModel):
    status: ReportStatus

    @field_validator('status')
    @classmethod
    def status_must_be_review_target(cls, value: ReportStatus) -> ReportStatus:
        if value not in REVIEW_TARGETS:
            raise ValueError('status must be verified or rejected')
        return value


class ReportOut(BaseModel):
    id: str
    title: str
    category: ReportCategory
    description: str
    location: Optional[str]
    image_url: Optional[str]
    status: ReportStatus
    user_id: str
    verified_by: Optional[str]
    verified_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime


class ReportStats(BaseModel):
    total: int
    pending: int
    verified: int
    rejected: int
