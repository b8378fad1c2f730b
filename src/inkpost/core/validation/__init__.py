"""Domain validation utilities."""

from .email import EmailValidator
from .schedule import ResolvedSchedule, ScheduleInput, ScheduleResolver

__all__ = ["EmailValidator", "ResolvedSchedule", "ScheduleInput", "ScheduleResolver"]
