from __future__ import annotations

import logging
from time import perf_counter

from smarter_scheduler.core.config import ALL_DAYS, DEFAULT_ENGINE_CONFIG, WEEKDAYS, EngineConfig
from smarter_scheduler.core.exceptions import AppError, SchedulerError
from smarter_scheduler.models.schedule import (
    Assignment,
    Faculty,
    ScheduleOutcome,
    ScheduleRequest,
    Subject,
)
from smarter_scheduler.services.availability import (
    OccupancyIndex,
    is_break,
    is_faculty_free,
    is_room_free,
    is_within_availability,
)
from smarter_scheduler.services.time_grid import SlotSegment, enumerate_slots, to_clock_time, to_minutes

logger = logging.getLogger(__name__)


class GreedyAllocator:
    """First-fit allocator over a discretized weekly grid.

    Iteration order is subject, faculty, weekday, candidate slot, room, all in
    input (or configured) order. The first feasible placement always wins, so
    identical input yields an identical grid and conflict list.
    """

    def __init__(self, *, request: ScheduleRequest, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> None:
        self.request = request
        self.config = config
        self._validate_request()
        window = request.institution_window
        self.candidate_slots: list[SlotSegment] = enumerate_slots(
            to_minutes(window.start_time),
            to_minutes(window.end_time),
            config.slot_minutes,
        )
        self.index = OccupancyIndex()
        self.assignments: list[Assignment] = []
        self.conflicts: list[str] = []

    def _validate_request(self) -> None:
        # Every time string is parsed once up front so a malformed value fails
        # the run before anything is placed.
        window = self.request.institution_window
        to_minutes(window.start_time)
        to_minutes(window.end_time)
        if len(set(self.request.rooms)) != len(self.request.rooms):
            raise SchedulerError("Room identifiers must be unique")
        for item in self.request.break_periods:
            if item.day != ALL_DAYS and item.day not in WEEKDAYS:
                raise SchedulerError(f"Unknown break day {item.day!r}")
            to_minutes(item.start_time)
            to_minutes(item.end_time)
        for subject in self.request.subjects:
            if subject.effective_duration(self.config.slot_minutes) <= 0:
                raise SchedulerError(
                    f"Subject {subject.name} must have a positive duration",
                    details={"subject": subject.name},
                )
            if subject.classes_per_week < 0:
                raise SchedulerError(
                    f"Subject {subject.name} cannot have a negative class count",
                    details={"subject": subject.name},
                )
            for faculty in subject.faculty:
                for window_entry in faculty.availability:
                    to_minutes(window_entry.start_time)
                    to_minutes(window_entry.end_time)

    def _commit(self, assignment: Assignment) -> None:
        self.assignments.append(assignment)
        self.index.record(assignment)

    def _first_free_room(self, day: str, start: int, end: int) -> str | None:
        for room in self.request.rooms:
            if is_room_free(self.index, day, room, start, end):
                return room
        return None

    def _schedule_pair(self, subject: Subject, faculty: Faculty) -> int:
        target = subject.classes_per_week
        duration = subject.effective_duration(self.config.slot_minutes)
        available_days = {window.day for window in faculty.availability}
        scheduled = 0

        for day in self.config.days:
            if scheduled >= target:
                break
            if day not in available_days:
                continue

            for slot in self.candidate_slots:
                if scheduled >= target:
                    break
                start = slot.start
                end = start + duration
                if not is_within_availability(faculty.availability, day, start, end):
                    continue
                if is_break(self.request.break_periods, day, start, end):
                    continue
                if not is_faculty_free(self.index, day, faculty.id, start, end):
                    continue

                room = self._first_free_room(day, start, end)
                if room is None:
                    message = (
                        f"Cannot schedule {subject.name} with {faculty.name} "
                        f"on {day} at {to_clock_time(start)} - no available room"
                    )
                    logger.debug(message)
                    self.conflicts.append(message)
                    continue

                self._commit(
                    Assignment(
                        day=day,
                        start_time=to_clock_time(start),
                        end_time=to_clock_time(end),
                        subject=subject.name,
                        faculty=faculty.name,
                        faculty_id=faculty.id,
                        room=room,
                        duration=duration,
                    )
                )
                scheduled += 1

        if scheduled < target:
            message = f"Only scheduled {scheduled}/{target} classes for {subject.name} with {faculty.name}"
            logger.debug(message)
            self.conflicts.append(message)
        return scheduled

    def _format_schedule(self) -> dict[str, list[Assignment]]:
        formatted: dict[str, list[Assignment]] = {}
        for day in self.config.days:
            formatted[day] = sorted(
                (item for item in self.assignments if item.day == day),
                key=lambda item: to_minutes(item.start_time),
            )
        return formatted

    def run(self) -> ScheduleOutcome:
        started = perf_counter()
        logger.info(
            "Scheduler run subjects=%s rooms=%s candidate_slots=%s",
            len(self.request.subjects),
            len(self.request.rooms),
            len(self.candidate_slots),
        )
        for subject in self.request.subjects:
            for faculty in subject.faculty:
                self._schedule_pair(subject, faculty)

        schedule = self._format_schedule()
        logger.info(
            "Scheduler finished assignments=%s conflicts=%s runtime_ms=%s",
            len(self.assignments),
            len(self.conflicts),
            int((perf_counter() - started) * 1000),
        )
        if self.conflicts:
            message = f"Schedule generated with {len(self.conflicts)} conflicts"
        else:
            message = "Schedule generated successfully"
        return ScheduleOutcome(
            success=True,
            message=message,
            schedule=schedule,
            conflicts=list(self.conflicts),
        )


def generate_schedule(request: ScheduleRequest, config: EngineConfig | None = None) -> ScheduleOutcome:
    """Run one allocation; invalid input produces a failed outcome instead of a partial grid."""
    try:
        allocator = GreedyAllocator(request=request, config=config or DEFAULT_ENGINE_CONFIG)
        return allocator.run()
    except AppError as exc:
        logger.warning("Schedule generation failed: %s", exc.message)
        return ScheduleOutcome(success=False, message=f"Error generating schedule: {exc.message}")
