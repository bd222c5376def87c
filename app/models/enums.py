from enum import Enum
import sqlalchemy as sa
from sqlalchemy import Column


class AppRole(str, Enum):
    USER = 'USER'
    MODERATOR = 'MODERATOR'


class ReportCategory(str, Enum):
    POWER_OUTAGE = 'power_outage'
    WATER_CUT = 'water_cut'
    ROAD_DAMAGE = 'road_damage'
    OTHER = 'other'


class ReportStatus(str, Enum):
    PENDING = 'pending'
    VERIFIED = 'verified'
    REJECTED = 'rejected'


def enum_column(enum_cls: type[Enum], name: str, **kwargs) -> Column:
    return Column(
        sa.Enum(
            enum_cls,
            values_callable=lambda enum: [item.value for item in enum],
            name=name,
        ),
        nullable=False,
        **kwargs,
    )
