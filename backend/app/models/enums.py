from __future__ import annotations

import enum


class RecordType(enum.StrEnum):
    """Kind of logged interval."""

    WORK = "work"
    TIME_OFF = "time_off"


class ApprovalStatus(enum.StrEnum):
    """State machine for monthly goals and hour conversions."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DecisionAction(enum.StrEnum):
    """Admin decision on a pending request."""

    APPROVE = "approve"
    REJECT = "reject"


class ApprovalKind(enum.StrEnum):
    """Entity kinds governed by the approval workflow."""

    GOAL = "goal"
    CONVERSION = "conversion"


class ConversionType(enum.StrEnum):
    """What accumulated extra hours are redeemed as."""

    MONEY = "money"
    TIME_OFF = "time_off"


class UserRole(enum.StrEnum):
    """Role carried on the identity provider's claims."""

    ADMIN = "admin"
    COLLABORATOR = "collaborator"


class WorkingDays(enum.StrEnum):
    """Which days a user normally works, used to pre-fill the record form."""

    WEEKDAYS = "weekdays"
    ALL = "all"
    WEEKENDS = "weekends"
