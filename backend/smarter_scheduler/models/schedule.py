from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class InstitutionWindow:
    start_time: str
    end_time: str


@dataclass(frozen=True)
class BreakPeriod:
    day: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class AvailabilityWindow:
    day: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class Faculty:
    id: str
    name: str
    availability: tuple[AvailabilityWindow, ...] = ()


@dataclass(frozen=True)
class Subject:
    name: str
    duration: int | None
    classes_per_week: int
    faculty: tuple[Faculty, ...] = ()
    time: int | None = None

    def effective_duration(self, default: int) -> int:
        if self.duration is not None:
            return self.duration
        if self.time is not None:
            return self.time
        return default


@dataclass(frozen=True)
class ScheduleRequest:
    institution_window: InstitutionWindow
    break_periods: tuple[BreakPeriod, ...] = ()
    rooms: tuple[str, ...] = ()
    subjects: tuple[Subject, ...] = ()


@dataclass(frozen=True)
class Assignment:
    day: str
    start_time: str
    end_time: str
    subject: str
    faculty: str
    faculty_id: str
    room: str
    duration: int

    # A committed assignment is always an occupied, non-break cell of the grid.
    is_break = False


@dataclass(frozen=True)
class GridCell:
    start_time: str
    end_time: str
    room: str | None = None
    subject: str | None = None
    faculty: str | None = None
    is_break: bool = False


@dataclass
class ScheduleOutcome:
    success: bool
    message: str
    schedule: dict[str, list[Assignment]] = field(default_factory=dict)
    conflicts: list[str] = field(default_factory=list)

    @property
    def assignment_count(self) -> int:
        return sum(len(items) for items in self.schedule.values())
