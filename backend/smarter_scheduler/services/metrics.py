from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol

from smarter_scheduler.core.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from smarter_scheduler.models.schedule import Assignment, GridCell, ScheduleOutcome, ScheduleRequest
from smarter_scheduler.services.availability import is_break, overlaps
from smarter_scheduler.services.time_grid import enumerate_slots, to_clock_time, to_minutes


class CellLike(Protocol):
    start_time: str
    end_time: str
    room: str | None
    subject: str | None
    is_break: bool


Grid = Mapping[str, Sequence[CellLike]]


@dataclass(frozen=True)
class RoomUtilization:
    room_id: str
    utilization: float


@dataclass(frozen=True)
class Recommendation:
    type: Literal["optimization", "workload", "efficiency", "conflict"]
    title: str
    description: str


@dataclass
class Metrics:
    overall_utilization: float
    room_utilization: list[RoomUtilization] = field(default_factory=list)
    total_slots: int = 0
    occupied_slots: int = 0


@dataclass
class Insights:
    avg_utilization: float
    conflicts: int
    peak_time: str
    active_faculty: int
    room_utilization: list[RoomUtilization] = field(default_factory=list)
    recommendations: list[Recommendation] = field(default_factory=list)


def _ratio(occupied: int, total: int) -> float:
    return (occupied / total) * 100 if total > 0 else 0.0


def _countable_cells(grid: Grid):
    for cells in grid.values():
        for cell in cells:
            if not cell.is_break:
                yield cell


def _occupancy(grid: Grid) -> tuple[int, int]:
    total = 0
    occupied = 0
    for cell in _countable_cells(grid):
        total += 1
        if cell.subject:
            occupied += 1
    return total, occupied


def build_occupancy_grid(
    schedule: Mapping[str, Sequence[Assignment]],
    request: ScheduleRequest,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> dict[str, list[GridCell]]:
    """Expand committed assignments into one cell per room, day and discretized slot."""
    window = request.institution_window
    slots = enumerate_slots(to_minutes(window.start_time), to_minutes(window.end_time), config.slot_minutes)

    grid: dict[str, list[GridCell]] = {}
    for day in config.days:
        day_assignments = [
            (item, to_minutes(item.start_time), to_minutes(item.end_time)) for item in schedule.get(day, [])
        ]
        cells: list[GridCell] = []
        for room in request.rooms:
            for slot in slots:
                occupant = next(
                    (
                        item
                        for item, start, end in day_assignments
                        if item.room == room and overlaps(slot.start, slot.end, start, end)
                    ),
                    None,
                )
                cells.append(
                    GridCell(
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        room=room,
                        subject=occupant.subject if occupant else None,
                        faculty=occupant.faculty if occupant else None,
                        is_break=is_break(request.break_periods, day, slot.start, slot.end),
                    )
                )
        grid[day] = cells
    return grid


def utilization(grid: Grid) -> float:
    total, occupied = _occupancy(grid)
    return _ratio(occupied, total)


def per_room_utilization(grid: Grid) -> list[RoomUtilization]:
    stats: dict[str, list[int]] = {}
    for cell in _countable_cells(grid):
        if not cell.room:
            continue
        entry = stats.setdefault(cell.room, [0, 0])
        entry[0] += 1
        if cell.subject:
            entry[1] += 1
    return [RoomUtilization(room_id=room, utilization=_ratio(occupied, total)) for room, (total, occupied) in stats.items()]


def build_recommendations(
    room_utilization: Sequence[RoomUtilization],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[Recommendation]:
    recommendations: list[Recommendation] = []

    underutilized = [item for item in room_utilization if item.utilization < config.low_utilization_threshold]
    if underutilized:
        recommendations.append(
            Recommendation(
                type="efficiency",
                title="Underutilized Rooms",
                description=(
                    f"{len(underutilized)} rooms have low utilization "
                    f"({', '.join(item.room_id for item in underutilized)}). "
                    "Consider reassigning classes or reviewing schedule."
                ),
            )
        )

    overutilized = [item for item in room_utilization if item.utilization > config.high_utilization_threshold]
    if overutilized:
        recommendations.append(
            Recommendation(
                type="optimization",
                title="Optimize Peak Hours",
                description=(
                    f"Rooms {', '.join(item.room_id for item in overutilized)} are overutilized. "
                    "Consider redistributing classes to balance load."
                ),
            )
        )

    return recommendations


def compute_metrics(grid: Grid) -> Metrics:
    total, occupied = _occupancy(grid)
    return Metrics(
        overall_utilization=_ratio(occupied, total),
        room_utilization=per_room_utilization(grid),
        total_slots=total,
        occupied_slots=occupied,
    )


def peak_time(grid: Grid) -> str:
    counts: Counter[tuple[int, int]] = Counter()
    for cell in _countable_cells(grid):
        if cell.subject:
            counts[(to_minutes(cell.start_time), to_minutes(cell.end_time))] += 1
    if not counts:
        return "N/A"
    # Earliest interval wins a tie.
    (start, end), _ = min(counts.items(), key=lambda item: (-item[1], item[0]))
    return f"{to_clock_time(start)}-{to_clock_time(end)}"


def build_insights(
    outcome: ScheduleOutcome,
    request: ScheduleRequest,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    grid: Grid | None = None,
) -> Insights:
    if grid is None:
        grid = build_occupancy_grid(outcome.schedule, request, config)
    metrics = compute_metrics(grid)
    recommendations = build_recommendations(metrics.room_utilization, config)
    if outcome.conflicts:
        recommendations.append(
            Recommendation(
                type="conflict",
                title="Resolve Scheduling Conflicts",
                description=(
                    f"{len(outcome.conflicts)} scheduling requirements could not be met. "
                    "Review faculty availability or add rooms."
                ),
            )
        )
    faculty_ids = {faculty.id for subject in request.subjects for faculty in subject.faculty}
    return Insights(
        avg_utilization=round(metrics.overall_utilization, 2),
        conflicts=len(outcome.conflicts),
        peak_time=peak_time(grid),
        active_faculty=len(faculty_ids),
        room_utilization=metrics.room_utilization,
        recommendations=recommendations,
    )
