from smarter_scheduler.models.schedule import (
    Assignment,
    AvailabilityWindow,
    BreakPeriod,
    Faculty,
    GridCell,
    InstitutionWindow,
    ScheduleOutcome,
    ScheduleRequest,
    Subject,
)

__all__ = [
    "Assignment",
    "AvailabilityWindow",
    "BreakPeriod",
    "Faculty",
    "GridCell",
    "InstitutionWindow",
    "ScheduleOutcome",
    "ScheduleRequest",
    "Subject",
]
