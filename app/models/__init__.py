from app.models.base import CreatedAtModel, IDModel, TimestampModel
from app.models.user import User
from app.models.user_role import UserRole
from app.models.refresh_token import RefreshToken
from app.models.report import Report

__all__ = [
    'IDModel',
    'CreatedAtModel',
    'TimestampModel',
    'User',
    'UserRole',
    'RefreshToken',
    'Report',
]
