import copy
from datetime import timedelta

import pytest

from agents.schedule_builder import ScheduleBuilder
from agents.machine_matcher import NoMachinesAvailableError
from models.policy import SchedulingPolicy

from conftest import NOW, make_job, make_machine


def _minutes(sj):
    return (sj.scheduled_end - sj.scheduled_start).total_seconds() / 60


def test_assignments_follow_rank_and_earliest_machine(jobs, machines, goals):
    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    placed = {sj.job_id: sj for sj in schedule}
    assert [sj.job_id for sj in schedule] == ["J002", "J004", "J001", "J003"]
    assert placed["J002"].assigned_machine == "M1"
    assert placed["J004"].assigned_machine == "M1"
    assert placed["J001"].assigned_machine == "M2"
    assert placed["J003"].assigned_machine == "M2"

    # J004 waits for J002 plus its 6 minute buffer
    assert placed["J004"].scheduled_start == NOW + timedelta(minutes=76)
    # J001 runs in parallel on M2
    assert placed["J001"].scheduled_start == NOW


def test_sequence_numbers_form_a_permutation(jobs, machines, goals):
    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    assert sorted(sj.sequence_number for sj in schedule) == list(range(1, len(jobs) + 1))


def test_end_equals_start_plus_effective_setup_and_duration(jobs, machines, goals):
    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    for sj in schedule:
        machine = next(m for m in machines if m.machine_id == sj.assigned_machine)
        expected = sj.job.setup_time * machine.setup_time_multiplier + sj.job.estimated_duration
        assert _minutes(sj) == pytest.approx(expected)
        assert sj.setup_time == pytest.approx(sj.job.setup_time * machine.setup_time_multiplier)


def test_assigned_machines_are_eligible(jobs, machines, goals):
    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    by_id = {m.machine_id: m for m in machines}
    for sj in schedule:
        assert by_id[sj.assigned_machine].is_available
        assert by_id[sj.assigned_machine].can_cut(sj.job)
        assert sj.compatible


def test_no_overlaps_on_any_machine(jobs, machines, goals):
    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    for machine in machines:
        timeline = schedule.get_machine_jobs(machine.machine_id)
        for previous, current in zip(timeline, timeline[1:]):
            assert current.scheduled_start >= previous.released_at()


def test_buffer_time_rule(goals):
    jobs = [make_job("SHORT", estimated_duration=30), make_job("LONG", estimated_duration=200)]
    schedule = ScheduleBuilder().build(jobs, [make_machine()], goals, NOW)

    assert schedule.find("SHORT").buffer_time == 5
    assert schedule.find("LONG").buffer_time == pytest.approx(20.0)


def test_inputs_are_not_mutated(jobs, machines, goals):
    jobs_before = copy.deepcopy(jobs)
    machines_before = copy.deepcopy(machines)

    ScheduleBuilder().build(jobs, machines, goals, NOW)

    assert jobs == jobs_before
    assert machines == machines_before


def test_build_is_deterministic(jobs, machines, goals):
    first = ScheduleBuilder().build(jobs, machines, goals, NOW)
    second = ScheduleBuilder().build(jobs, machines, goals, NOW)

    assert first.to_dict() == second.to_dict()


def test_empty_machine_list_raises(jobs, goals):
    with pytest.raises(NoMachinesAvailableError):
        ScheduleBuilder().build(jobs, [], goals, NOW)


def test_flag_policy_reports_unassignable_jobs(machines, goals):
    jobs = [make_job("OK"), make_job("TI", material_type="titanium")]

    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    assert [sj.job_id for sj in schedule] == ["OK"]
    assert [u.job.job_id for u in schedule.unassignable] == ["TI"]
    assert "titanium" in schedule.unassignable[0].reason
    assert schedule.find("OK").sequence_number == 1


def test_fallback_policy_places_job_on_first_machine(machines, goals):
    policy = SchedulingPolicy(unassignable_policy="fallback")
    jobs = [make_job("TI", material_type="titanium")]

    schedule = ScheduleBuilder(policy).build(jobs, machines, goals, NOW)

    placed = schedule.find("TI")
    assert placed.assigned_machine == "M1"
    assert not placed.compatible
    assert not schedule.unassignable


def test_unavailable_machines_receive_no_work(goals):
    machines = [make_machine("M1", current_status="offline"), make_machine("M2")]

    schedule = ScheduleBuilder().build([make_job("A"), make_job("B")], machines, goals, NOW)

    assert {sj.assigned_machine for sj in schedule} == {"M2"}


def test_dependencies_are_informational_by_default(machines, goals):
    jobs = [
        make_job("BASE", priority="low"),
        make_job("TOP", priority="critical", dependencies=["BASE"]),
    ]

    schedule = ScheduleBuilder().build(jobs, machines, goals, NOW)

    assert schedule.find("TOP").sequence_number == 1


def test_enforced_dependencies_run_after_prerequisites(machines, goals):
    policy = SchedulingPolicy(enforce_dependencies=True)
    jobs = [
        make_job("BASE", priority="low"),
        make_job("TOP", priority="critical", dependencies=["BASE"]),
    ]

    schedule = ScheduleBuilder(policy).build(jobs, machines, goals, NOW)

    base, top = schedule.find("BASE"), schedule.find("TOP")
    assert base.sequence_number == 1
    assert top.sequence_number == 2
    assert top.scheduled_start == base.scheduled_end


def test_dependencies_outside_the_queue_are_ignored(machines, goals):
    policy = SchedulingPolicy(enforce_dependencies=True)
    jobs = [make_job("A", dependencies=["SHIPPED-LAST-WEEK"])]

    schedule = ScheduleBuilder(policy).build(jobs, machines, goals, NOW)

    assert schedule.find("A").scheduled_start == NOW


def test_dependency_cycle_raises(machines, goals):
    policy = SchedulingPolicy(enforce_dependencies=True)
    jobs = [make_job("A", dependencies=["B"]), make_job("B", dependencies=["A"])]

    with pytest.raises(ValueError, match="Circular"):
        ScheduleBuilder(policy).build(jobs, machines, goals, NOW)


def test_job_depending_on_unassignable_job_is_unassignable(machines, goals):
    policy = SchedulingPolicy(enforce_dependencies=True)
    jobs = [
        make_job("TI", material_type="titanium"),
        make_job("WELD", dependencies=["TI"]),
    ]

    schedule = ScheduleBuilder(policy).build(jobs, machines, goals, NOW)

    assert len(schedule) == 0
    reasons = {u.job.job_id: u.reason for u in schedule.unassignable}
    assert "TI" in reasons["WELD"]
