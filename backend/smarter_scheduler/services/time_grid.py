from __future__ import annotations

import re
from dataclasses import dataclass

from smarter_scheduler.core.exceptions import FormatError, SchedulerError

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class SlotSegment:
    start: int
    end: int

    @property
    def start_time(self) -> str:
        return to_clock_time(self.start)

    @property
    def end_time(self) -> str:
        return to_clock_time(self.end)


def to_minutes(value: str) -> int:
    if not isinstance(value, str):
        raise FormatError(value)
    match = TIME_PATTERN.match(value.strip())
    if match is None:
        raise FormatError(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise FormatError(value)
    return hours * 60 + minutes


def to_clock_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def enumerate_slots(start: int | str, end: int | str, duration: int) -> list[SlotSegment]:
    """Consecutive ``duration``-minute slots from ``start``; a trailing partial slot is dropped."""
    if duration <= 0:
        raise SchedulerError("Slot duration must be a positive number of minutes", details={"duration": duration})
    start_min = to_minutes(start) if isinstance(start, str) else start
    end_min = to_minutes(end) if isinstance(end, str) else end

    slots: list[SlotSegment] = []
    cursor = start_min
    while cursor + duration <= end_min:
        slots.append(SlotSegment(start=cursor, end=cursor + duration))
        cursor += duration
    return slots
