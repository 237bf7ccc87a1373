from datetime import datetime, time, timedelta, timezone

import pytest

from models.job import Job, parse_datetime, to_utc
from models.machine import Machine, ThicknessRange
from models.constraints import OptimizationGoals, OperationalConstraints, QualityRequirements
from models.request import OptimizationRequest
from models.policy import SchedulingPolicy
from models.schedule import ScheduledJob, Schedule

from conftest import NOW, make_job, make_machine


def test_job_rejects_negative_duration():
    with pytest.raises(ValueError):
        make_job(estimated_duration=-5)


def test_job_rejects_negative_setup_time():
    with pytest.raises(ValueError):
        make_job(setup_time=-1)


def test_job_from_dict_accepts_form_keys():
    job = Job.from_dict({
        "jobId": "J042",
        "jobName": "Gusset plate",
        "priority": "urgent",
        "dueDate": "2026-03-03T12:00:00",
        "estimatedDuration": 90,
        "materialType": "stainless_steel",
        "thickness": 6,
        "setupTime": 15,
        "partCount": 40,
        "customerImportance": "vip",
        "profitMargin": 25,
        "dependencies": ["J041"],
    })

    assert job.job_id == "J042"
    assert job.due_date == datetime(2026, 3, 3, 12, 0)
    assert job.estimated_duration == 90.0
    assert job.customer_importance == "vip"
    assert job.dependencies == ["J041"]
    assert job.is_urgent


def test_job_round_trips_through_dict():
    job = make_job(dependencies=["J000"])
    assert Job.from_dict(job.to_dict()) == job


def test_parse_datetime_accepts_trailing_z():
    parsed = parse_datetime("2026-03-02T08:00:00Z")
    assert parsed.utcoffset() == timedelta(0)


def test_unknown_priority_is_accepted():
    job = make_job(priority="whenever")
    assert not job.is_urgent


def test_hours_until_due():
    job = make_job(due_date=NOW + timedelta(hours=30))
    assert job.hours_until_due(NOW) == pytest.approx(30.0)


def test_machine_can_cut_checks_material_and_thickness():
    machine = make_machine(thickness_range=ThicknessRange(1.0, 10.0))

    assert machine.can_cut(make_job(thickness=10.0))
    assert not machine.can_cut(make_job(thickness=10.5))
    assert not machine.can_cut(make_job(material_type="aluminum"))


def test_machine_effective_setup_time():
    machine = make_machine(setup_time_multiplier=1.5)
    assert machine.effective_setup_time(make_job(setup_time=20)) == pytest.approx(30.0)


def test_machine_from_dict_accepts_form_keys():
    machine = Machine.from_dict({
        "machineId": "LC-9",
        "machineName": "Fiber",
        "maxPower": 3000,
        "materialCompatibility": ["aluminum"],
        "thicknessRange": {"min": 0.5, "max": 8},
        "currentStatus": "maintenance",
        "setupTimeMultiplier": 1.2,
    })

    assert machine.machine_id == "LC-9"
    assert machine.thickness_range.max == 8.0
    assert not machine.is_available


@pytest.mark.parametrize("weight", [-0.1, 1.5])
def test_goal_weights_must_lie_in_unit_interval(weight):
    with pytest.raises(ValueError):
        OptimizationGoals(urgency_weight=weight)


def test_goals_with_weights_returns_copy():
    goals = OptimizationGoals()
    changed = goals.with_weights({"profitability_weight": 1.0})

    assert changed.profitability_weight == 1.0
    assert changed.urgency_weight == goals.urgency_weight
    assert goals.profitability_weight == 0.2


def test_operational_constraints_working_window():
    constraints = OperationalConstraints.from_dict({
        "workingHours": {"start": "07:30", "end": "16:00"},
        "minimumBreakTime": 20,
    })

    assert constraints.get_working_window_minutes() == 510
    assert constraints.minimum_break_time == 20.0


def test_request_from_dict_reads_bundle_keys():
    bundle = {
        "jobQueue": [make_job().to_dict()],
        "machineCapabilities": [make_machine().to_dict()],
        "resourceConstraints": {"availableOperators": 4},
        "optimizationGoals": {"urgencyWeight": 0.5},
    }

    request = OptimizationRequest.from_dict(bundle)

    assert request.job_count == 1
    assert request.resources.available_operators == 4
    assert request.goals.urgency_weight == 0.5
    assert request.quality == QualityRequirements()


def test_policy_rejects_unknown_unassignable_policy():
    with pytest.raises(ValueError):
        SchedulingPolicy(unassignable_policy="ignore")


def test_policy_buffer_minutes():
    policy = SchedulingPolicy()
    assert policy.buffer_minutes(30) == 5
    assert policy.buffer_minutes(120) == pytest.approx(12.0)


def test_scheduled_job_timing_helpers():
    job = make_job(due_date=NOW + timedelta(minutes=60))
    sj = ScheduledJob(
        job=job,
        assigned_machine="M1",
        scheduled_start=NOW,
        scheduled_end=NOW + timedelta(minutes=70),
        sequence_number=1,
        buffer_time=6.0,
        setup_time=10.0,
    )

    assert sj.get_duration_minutes() == 70.0
    assert sj.is_late()
    assert sj.get_tardiness_minutes() == pytest.approx(10.0)
    assert sj.released_at() == NOW + timedelta(minutes=76)
    assert sj.to_dict()["assignedMachine"] == "M1"


def test_schedule_machine_views():
    schedule = Schedule()
    for seq, (machine_id, offset) in enumerate([("M1", 60), ("M2", 0), ("M1", 0)], 1):
        start = NOW + timedelta(minutes=offset)
        schedule.add(ScheduledJob(
            job=make_job(f"J{seq:03d}", setup_time=0, estimated_duration=30),
            assigned_machine=machine_id,
            scheduled_start=start,
            scheduled_end=start + timedelta(minutes=30),
            sequence_number=seq,
            buffer_time=5.0,
        ))

    assert [sj.job_id for sj in schedule.get_machine_jobs("M1")] == ["J003", "J001"]
    assert schedule.machine_busy_minutes() == {"M1": 60.0, "M2": 30.0}
    assert schedule.elapsed_hours() == pytest.approx(1.5)
    assert schedule.find("J002").assigned_machine == "M2"


# Clock conventions

def test_to_utc_reads_naive_values_as_utc():
    plus_two = timezone(timedelta(hours=2))

    assert to_utc(NOW) == NOW.replace(tzinfo=timezone.utc)
    assert to_utc(NOW.replace(tzinfo=plus_two)) == NOW.replace(hour=6, tzinfo=timezone.utc)


def test_uniform_request_is_left_alone():
    request = OptimizationRequest(jobs=[make_job()], machines=[make_machine()])

    aligned, now = request.align_timezones(NOW)

    assert aligned is request
    assert now is NOW


def test_mixed_request_is_aligned_to_utc():
    aware = make_job("A", due_date=parse_datetime("2026-03-05T12:00:00+02:00"))
    naive = make_job("N", due_date=datetime(2026, 3, 5, 12, 0))
    request = OptimizationRequest(jobs=[aware, naive], machines=[make_machine()])

    aligned, now = request.align_timezones(NOW)

    assert [j.due_date for j in aligned.jobs] == [
        datetime(2026, 3, 5, 10, 0, tzinfo=timezone.utc),
        datetime(2026, 3, 5, 12, 0, tzinfo=timezone.utc),
    ]
    assert now.tzinfo is timezone.utc
    assert request.jobs[1].due_date.tzinfo is None


def test_naive_now_is_aligned_to_aware_due_dates():
    due = (NOW + timedelta(days=1)).replace(tzinfo=timezone.utc)
    request = OptimizationRequest(jobs=[make_job(due_date=due)], machines=[make_machine()])

    aligned, now = request.align_timezones(NOW)

    assert aligned.jobs[0].due_date == due
    assert now == NOW.replace(tzinfo=timezone.utc)


# Working-hours window

def test_day_window():
    constraints = OperationalConstraints()

    assert constraints.get_working_window_minutes() == 540
    assert not constraints.crosses_midnight
    assert constraints.is_within_working_hours(time(12, 0))
    assert not constraints.is_within_working_hours(time(23, 0))


def test_overnight_window_wraps():
    constraints = OperationalConstraints(working_hours_start=time(22, 0), working_hours_end=time(6, 0))

    assert constraints.crosses_midnight
    assert constraints.get_working_window_minutes() == 480
    assert constraints.is_within_working_hours(time(23, 0))
    assert constraints.is_within_working_hours(time(0, 10))
    assert constraints.is_within_working_hours(time(6, 0))
    assert not constraints.is_within_working_hours(time(12, 0))
