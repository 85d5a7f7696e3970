from sqlmodel import SQLModel

from app.models.base import ApprovalMixin, TimestampMixin, UUIDBase
from app.models.conversion import HourConversion
from app.models.enums import (
    ApprovalKind,
    ApprovalStatus,
    ConversionType,
    DecisionAction,
    RecordType,
    UserRole,
    WorkingDays,
)
from app.models.goal import MonthlyGoal
from app.models.report import AIReport
from app.models.time_record import TimeRecord
from app.models.user import PreAuthorizedEmail, UserProfile, UserSettings

__all__ = [
    "AIReport",
    "ApprovalKind",
    "ApprovalMixin",
    "ApprovalStatus",
    "ConversionType",
    "DecisionAction",
    "HourConversion",
    "MonthlyGoal",
    "PreAuthorizedEmail",
    "RecordType",
    "SQLModel",
    "TimeRecord",
    "TimestampMixin",
    "UUIDBase",
    "UserProfile",
    "UserRole",
    "UserSettings",
    "WorkingDays",
]
