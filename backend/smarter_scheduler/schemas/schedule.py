from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from smarter_scheduler.core.config import ALL_DAYS, WEEKDAYS
from smarter_scheduler.models.schedule import (
    Assignment,
    AvailabilityWindow,
    BreakPeriod,
    Faculty,
    InstitutionWindow,
    ScheduleRequest,
    Subject,
)

DAY_VALUES = set(WEEKDAYS)
BREAK_DAY_VALUES = DAY_VALUES | {ALL_DAYS}


def _normalize_day(value: str, allowed: set[str]) -> str:
    day = value.strip().upper()
    if day not in allowed:
        raise ValueError("Invalid day value")
    return day


class TimeRangePayload(BaseModel):
    # Time strings are not pattern-checked here; the scheduler rejects a
    # malformed value as a failed run.
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    model_config = ConfigDict(populate_by_name=True)


class BreakPeriodPayload(TimeRangePayload):
    day: str

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return _normalize_day(value, BREAK_DAY_VALUES)


class AvailabilityPayload(TimeRangePayload):
    day: str

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return _normalize_day(value, DAY_VALUES)


class FacultyPayload(BaseModel):
    id: str = Field(min_length=1, max_length=64)
    name: str = Field(min_length=1, max_length=200)
    availability: list[AvailabilityPayload] = Field(default_factory=list)


class SubjectPayload(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    duration: int | None = Field(default=None, ge=1, le=1440)
    time: int | None = Field(default=None, ge=1, le=1440)
    classes_per_week: int = Field(alias="no_of_classes_per_week", ge=0, le=100)
    faculty: list[FacultyPayload] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class ScheduleInputPayload(BaseModel):
    college_time: TimeRangePayload
    break_periods: list[BreakPeriodPayload] = Field(
        default_factory=list,
        validation_alias=AliasChoices("break_", "break_periods"),
    )
    rooms: list[str] = Field(default_factory=list)
    subjects: list[SubjectPayload] = Field(default_factory=list)

    @field_validator("rooms")
    @classmethod
    def validate_rooms(cls, value: list[str]) -> list[str]:
        cleaned = [room.strip() for room in value]
        if any(not room for room in cleaned):
            raise ValueError("Room identifiers cannot be empty")
        seen: set[str] = set()
        duplicates: set[str] = set()
        for room in cleaned:
            if room in seen:
                duplicates.add(room)
            else:
                seen.add(room)
        if duplicates:
            raise ValueError(f"Duplicate room id(s): {', '.join(sorted(duplicates))}")
        return cleaned

    @model_validator(mode="after")
    def validate_faculty_names(self) -> "ScheduleInputPayload":
        names_by_id: dict[str, str] = {}
        for subject in self.subjects:
            for faculty in subject.faculty:
                known = names_by_id.setdefault(faculty.id, faculty.name)
                if known != faculty.name:
                    raise ValueError(f"Faculty id {faculty.id} is used with different names")
        return self

    def to_domain(self) -> ScheduleRequest:
        return ScheduleRequest(
            institution_window=InstitutionWindow(
                start_time=self.college_time.start_time,
                end_time=self.college_time.end_time,
            ),
            break_periods=tuple(
                BreakPeriod(day=item.day, start_time=item.start_time, end_time=item.end_time)
                for item in self.break_periods
            ),
            rooms=tuple(self.rooms),
            subjects=tuple(
                Subject(
                    name=subject.name,
                    duration=subject.duration,
                    time=subject.time,
                    classes_per_week=subject.classes_per_week,
                    faculty=tuple(
                        Faculty(
                            id=faculty.id,
                            name=faculty.name,
                            availability=tuple(
                                AvailabilityWindow(
                                    day=window.day,
                                    start_time=window.start_time,
                                    end_time=window.end_time,
                                )
                                for window in faculty.availability
                            ),
                        )
                        for faculty in subject.faculty
                    ),
                )
                for subject in self.subjects
            ),
        )


class AssignmentOut(BaseModel):
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    subject: str
    faculty: str
    faculty_id: str = Field(alias="facultyId")
    room: str
    duration: int

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_domain(cls, assignment: Assignment) -> "AssignmentOut":
        return cls(
            start_time=assignment.start_time,
            end_time=assignment.end_time,
            subject=assignment.subject,
            faculty=assignment.faculty,
            faculty_id=assignment.faculty_id,
            room=assignment.room,
            duration=assignment.duration,
        )


def schedule_to_out(schedule: dict[str, list[Assignment]]) -> dict[str, list[AssignmentOut]]:
    return {day: [AssignmentOut.from_domain(item) for item in items] for day, items in schedule.items()}
