from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from smarter_scheduler.core.config import ALL_DAYS
from smarter_scheduler.models.schedule import Assignment, AvailabilityWindow, BreakPeriod
from smarter_scheduler.services.time_grid import to_minutes


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


def is_within_availability(
    windows: Iterable[AvailabilityWindow],
    day: str,
    slot_start: int,
    slot_end: int,
) -> bool:
    for window in windows:
        if window.day != day:
            continue
        if to_minutes(window.start_time) <= slot_start and slot_end <= to_minutes(window.end_time):
            return True
    return False


def is_break(breaks: Iterable[BreakPeriod], day: str, slot_start: int, slot_end: int) -> bool:
    for item in breaks:
        if item.day != ALL_DAYS and item.day != day:
            continue
        if overlaps(slot_start, slot_end, to_minutes(item.start_time), to_minutes(item.end_time)):
            return True
    return False


class OccupancyIndex:
    """Committed intervals keyed by ``(day, room)`` and ``(day, faculty_id)``."""

    def __init__(self) -> None:
        self._by_room: dict[tuple[str, str], list[tuple[int, int]]] = defaultdict(list)
        self._by_faculty: dict[tuple[str, str], list[tuple[int, int]]] = defaultdict(list)

    @classmethod
    def from_assignments(cls, assignments: Iterable[Assignment]) -> "OccupancyIndex":
        index = cls()
        for assignment in assignments:
            index.record(assignment)
        return index

    def record(self, assignment: Assignment) -> None:
        interval = (to_minutes(assignment.start_time), to_minutes(assignment.end_time))
        self._by_room[(assignment.day, assignment.room)].append(interval)
        self._by_faculty[(assignment.day, assignment.faculty_id)].append(interval)

    def room_intervals(self, day: str, room: str) -> list[tuple[int, int]]:
        return self._by_room.get((day, room), [])

    def faculty_intervals(self, day: str, faculty_id: str) -> list[tuple[int, int]]:
        return self._by_faculty.get((day, faculty_id), [])


def is_room_free(grid: OccupancyIndex, day: str, room: str, slot_start: int, slot_end: int) -> bool:
    return not any(
        overlaps(slot_start, slot_end, start, end) for start, end in grid.room_intervals(day, room)
    )


def is_faculty_free(grid: OccupancyIndex, day: str, faculty_id: str, slot_start: int, slot_end: int) -> bool:
    return not any(
        overlaps(slot_start, slot_end, start, end) for start, end in grid.faculty_intervals(day, faculty_id)
    )
