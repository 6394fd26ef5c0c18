import logging

import pytest

from smarter_scheduler.core.config import EngineConfig
from smarter_scheduler.models.schedule import (
    AvailabilityWindow,
    BreakPeriod,
    Faculty,
    InstitutionWindow,
    ScheduleRequest,
    Subject,
)
from smarter_scheduler.services.allocation import GreedyAllocator, generate_schedule
from smarter_scheduler.services.availability import is_break, is_within_availability, overlaps
from smarter_scheduler.services.time_grid import to_minutes

LUNCH = BreakPeriod(day="ALL_DAYS", start_time="13:00", end_time="14:00")


def build_request(subjects, rooms=("R1", "R2"), breaks=(LUNCH,), window=("09:30", "16:30")):
    return ScheduleRequest(
        institution_window=InstitutionWindow(start_time=window[0], end_time=window[1]),
        break_periods=tuple(breaks),
        rooms=tuple(rooms),
        subjects=tuple(subjects),
    )


def faculty(faculty_id, name, *windows):
    return Faculty(
        id=faculty_id,
        name=name,
        availability=tuple(AvailabilityWindow(day=day, start_time=start, end_time=end) for day, start, end in windows),
    )


def subject(name, members, classes_per_week=1, duration=50):
    return Subject(name=name, duration=duration, classes_per_week=classes_per_week, faculty=tuple(members))


def all_assignments(outcome):
    return [item for items in outcome.schedule.values() for item in items]


def assert_grid_invariants(outcome, request):
    windows_by_faculty = {
        member.id: member.availability for item in request.subjects for member in item.faculty
    }
    for day, items in outcome.schedule.items():
        for index, left in enumerate(items):
            left_start, left_end = to_minutes(left.start_time), to_minutes(left.end_time)
            assert left.day == day
            assert is_within_availability(windows_by_faculty[left.faculty_id], day, left_start, left_end)
            assert not is_break(request.break_periods, day, left_start, left_end)
            for right in items[index + 1 :]:
                right_start, right_end = to_minutes(right.start_time), to_minutes(right.end_time)
                if not overlaps(left_start, left_end, right_start, right_end):
                    continue
                assert left.room != right.room
                assert left.faculty_id != right.faculty_id


def test_scenario_two_classes_before_lunch_use_first_room():
    request = build_request(
        [subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))], classes_per_week=2)]
    )

    outcome = generate_schedule(request)

    assert outcome.success is True
    assert outcome.conflicts == []
    assert outcome.message == "Schedule generated successfully"
    monday = outcome.schedule["MONDAY"]
    assert [(item.start_time, item.end_time, item.room) for item in monday] == [
        ("09:30", "10:20", "R1"),
        ("10:20", "11:10", "R1"),
    ]
    assert all(item.subject == "Math" and item.faculty == "Prof A" for item in monday)
    assert all(not outcome.schedule[day] for day in outcome.schedule if day != "MONDAY")
    assert_grid_invariants(outcome, request)


def test_scenario_single_window_reports_shortfall():
    request = build_request(
        [subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "10:20"))], classes_per_week=2)]
    )

    outcome = generate_schedule(request)

    assert outcome.success is True
    assert len(all_assignments(outcome)) == 1
    assert outcome.conflicts == ["Only scheduled 1/2 classes for Math with Prof A"]
    assert outcome.message == "Schedule generated with 1 conflicts"


def test_scenario_shared_faculty_moves_to_next_slot():
    shared = faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))
    request = build_request(
        [subject("Math", [shared]), subject("Physics", [shared])],
        rooms=("R1",),
    )

    outcome = generate_schedule(request)

    assert outcome.conflicts == []
    monday = outcome.schedule["MONDAY"]
    assert [(item.subject, item.start_time, item.room) for item in monday] == [
        ("Math", "09:30", "R1"),
        ("Physics", "10:20", "R1"),
    ]
    assert_grid_invariants(outcome, request)


def test_room_exhaustion_is_reported_per_slot():
    request = build_request(
        [
            subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "10:20"))]),
            subject("Biology", [faculty("f2", "Prof B", ("MONDAY", "09:30", "10:20"))]),
        ],
        rooms=("R1",),
    )

    outcome = generate_schedule(request)

    assert [item.subject for item in all_assignments(outcome)] == ["Math"]
    assert outcome.conflicts == [
        "Cannot schedule Biology with Prof B on MONDAY at 09:30 - no available room",
        "Only scheduled 0/1 classes for Biology with Prof B",
    ]


def test_second_room_used_when_first_is_taken():
    request = build_request(
        [
            subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "10:20"))]),
            subject("Biology", [faculty("f2", "Prof B", ("MONDAY", "09:30", "10:20"))]),
        ],
        rooms=("R1", "R2"),
    )

    outcome = generate_schedule(request)

    assert outcome.conflicts == []
    assert [(item.subject, item.room) for item in outcome.schedule["MONDAY"]] == [("Math", "R1"), ("Biology", "R2")]


def test_each_faculty_pursues_its_own_target():
    request = build_request(
        [
            subject(
                "Chemistry",
                [
                    faculty("f1", "Prof A", ("TUESDAY", "09:30", "16:30")),
                    faculty("f2", "Prof B", ("WEDNESDAY", "09:30", "16:30")),
                ],
                classes_per_week=2,
            )
        ]
    )

    outcome = generate_schedule(request)

    assert outcome.conflicts == []
    assert [item.faculty for item in outcome.schedule["TUESDAY"]] == ["Prof A", "Prof A"]
    assert [item.faculty for item in outcome.schedule["WEDNESDAY"]] == ["Prof B", "Prof B"]


def test_earlier_weekday_wins_and_sunday_is_excluded():
    request = build_request(
        [
            subject(
                "History",
                [faculty("f1", "Prof A", ("SUNDAY", "09:30", "16:30"), ("THURSDAY", "09:30", "16:30"), ("TUESDAY", "11:10", "12:00"))],
                classes_per_week=2,
            )
        ]
    )

    outcome = generate_schedule(request)

    assert "SUNDAY" not in outcome.schedule
    assert [(item.day, item.start_time) for item in all_assignments(outcome)] == [
        ("TUESDAY", "11:10"),
        ("THURSDAY", "09:30"),
    ]


def test_subject_duration_drives_class_length_and_breaks():
    request = build_request(
        [subject("Lab", [faculty("f1", "Prof A", ("MONDAY", "09:30", "16:30"))], classes_per_week=3, duration=100)]
    )

    outcome = generate_schedule(request)

    monday = outcome.schedule["MONDAY"]
    # Starts at 12:50 and 13:40 would cross the lunch break.
    assert [(item.start_time, item.end_time) for item in monday] == [
        ("09:30", "11:10"),
        ("11:10", "12:50"),
        ("14:30", "16:10"),
    ]
    assert all(item.duration == 100 for item in monday)
    assert_grid_invariants(outcome, request)


def test_day_specific_break_only_blocks_that_day():
    request = build_request(
        [
            subject(
                "Art",
                [faculty("f1", "Prof A", ("MONDAY", "09:30", "10:20"), ("TUESDAY", "09:30", "10:20"))],
                classes_per_week=2,
            )
        ],
        breaks=(BreakPeriod(day="MONDAY", start_time="09:00", end_time="10:00"),),
    )

    outcome = generate_schedule(request)

    assert outcome.schedule["MONDAY"] == []
    assert [item.start_time for item in outcome.schedule["TUESDAY"]] == ["09:30"]
    assert outcome.conflicts == ["Only scheduled 1/2 classes for Art with Prof A"]


def test_missing_duration_falls_back_to_time_then_slot_length():
    members = [faculty("f1", "Prof A", ("MONDAY", "09:30", "16:30"))]
    request = build_request(
        [
            Subject(name="Seminar", duration=None, time=30, classes_per_week=1, faculty=tuple(members)),
            Subject(name="Reading", duration=None, classes_per_week=1, faculty=tuple(members)),
        ]
    )

    outcome = generate_schedule(request)

    assert [(item.subject, item.start_time, item.end_time) for item in outcome.schedule["MONDAY"]] == [
        ("Seminar", "09:30", "10:00"),
        ("Reading", "10:20", "11:10"),
    ]


def test_zero_target_schedules_nothing_without_conflict():
    request = build_request([subject("Elective", [faculty("f1", "Prof A", ("MONDAY", "09:30", "16:30"))], classes_per_week=0)])

    outcome = generate_schedule(request)

    assert all_assignments(outcome) == []
    assert outcome.conflicts == []


def test_unavailable_faculty_reports_zero_scheduled():
    request = build_request([subject("Music", [faculty("f1", "Prof A")], classes_per_week=1)])

    outcome = generate_schedule(request)

    assert outcome.conflicts == ["Only scheduled 0/1 classes for Music with Prof A"]


def test_days_sorted_by_start_time_and_all_configured_days_present():
    request = build_request(
        [
            subject("Late", [faculty("f1", "Prof A", ("MONDAY", "14:00", "16:30"))]),
            subject("Early", [faculty("f2", "Prof B", ("MONDAY", "09:30", "10:20"))]),
        ]
    )

    outcome = generate_schedule(request)

    assert list(outcome.schedule) == ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY"]
    assert [item.subject for item in outcome.schedule["MONDAY"]] == ["Early", "Late"]


def test_generation_is_deterministic():
    members = [
        faculty("f1", "Prof A", ("MONDAY", "09:30", "16:30"), ("WEDNESDAY", "09:30", "12:00")),
        faculty("f2", "Prof B", ("MONDAY", "09:30", "16:30"), ("FRIDAY", "10:00", "15:00")),
    ]
    request = build_request(
        [
            subject("Math", members, classes_per_week=4),
            subject("Physics", members[:1], classes_per_week=5, duration=100),
            subject("Biology", members[1:], classes_per_week=6),
        ],
        rooms=("R1",),
    )

    first = generate_schedule(request)
    second = generate_schedule(request)

    assert first.schedule == second.schedule
    assert first.conflicts == second.conflicts
    assert_grid_invariants(first, request)


def test_dense_input_keeps_room_and_faculty_invariants():
    members = [faculty(f"f{index}", f"Prof {index}", ("MONDAY", "09:30", "16:30"), ("TUESDAY", "09:30", "16:30")) for index in range(4)]
    request = build_request(
        [subject(f"Subject {index}", [members[index % 4], members[(index + 1) % 4]], classes_per_week=3) for index in range(6)],
        rooms=("R1", "R2"),
    )

    outcome = generate_schedule(request)

    assert outcome.success is True
    assert all_assignments(outcome)
    assert_grid_invariants(outcome, request)


def test_slot_granularity_is_configurable():
    request = build_request(
        [subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "11:00"))], classes_per_week=3, duration=30)],
        breaks=(),
    )

    outcome = generate_schedule(request, EngineConfig(slot_minutes=30))

    assert [item.start_time for item in outcome.schedule["MONDAY"]] == ["09:30", "10:00", "10:30"]


def test_configured_days_limit_the_week():
    request = build_request([subject("Math", [faculty("f1", "Prof A", ("SATURDAY", "09:30", "16:30"))])])

    outcome = generate_schedule(request, EngineConfig(days=("MONDAY", "TUESDAY")))

    assert list(outcome.schedule) == ["MONDAY", "TUESDAY"]
    assert outcome.conflicts == ["Only scheduled 0/1 classes for Math with Prof A"]


@pytest.mark.parametrize(
    "request_kwargs",
    [
        {"window": ("9h30", "16:30")},
        {"breaks": (BreakPeriod(day="ALL_DAYS", start_time="1300", end_time="14:00"),)},
    ],
)
def test_malformed_time_fails_whole_run(request_kwargs):
    request = build_request(
        [subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))])],
        **request_kwargs,
    )

    outcome = generate_schedule(request)

    assert outcome.success is False
    assert outcome.message.startswith("Error generating schedule: ")
    assert outcome.schedule == {}
    assert outcome.conflicts == []


def test_malformed_availability_of_untried_faculty_still_fails():
    request = build_request(
        [
            subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))]),
            subject("Art", [faculty("f2", "Prof B", ("SATURDAY", "ten", "11:00"))], classes_per_week=0),
        ]
    )

    outcome = generate_schedule(request)

    assert outcome.success is False
    assert "'ten'" in outcome.message


def test_non_positive_duration_fails_whole_run():
    request = build_request([subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))], duration=-10)])

    outcome = generate_schedule(request)

    assert outcome.success is False
    assert "positive duration" in outcome.message


def test_zero_duration_is_not_replaced_by_default():
    request = build_request([subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))], duration=0)])

    outcome = generate_schedule(request)

    assert outcome.success is False
    assert outcome.schedule == {}
    assert "positive duration" in outcome.message


def test_duplicate_rooms_fail_whole_run():
    request = build_request(
        [subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))])],
        rooms=("R1", "R1"),
    )

    outcome = generate_schedule(request)

    assert outcome.success is False
    assert outcome.message == "Error generating schedule: Room identifiers must be unique"


def test_allocator_instances_do_not_share_state():
    request = build_request([subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "13:00"))], classes_per_week=2)])

    first = GreedyAllocator(request=request)
    first.run()
    second = GreedyAllocator(request=request)

    assert second.assignments == []
    assert second.conflicts == []
    assert len(first.assignments) == 2


def test_run_logs_summary(caplog):
    request = build_request([subject("Math", [faculty("f1", "Prof A", ("MONDAY", "09:30", "10:20"))], classes_per_week=2)])

    with caplog.at_level(logging.INFO, logger="smarter_scheduler.services.allocation"):
        generate_schedule(request)

    assert any("assignments=1 conflicts=1" in record.getMessage() for record in caplog.records)
