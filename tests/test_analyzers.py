from datetime import timedelta

import pytest

from agents.schedule_builder import ScheduleBuilder
from agents.performance_analyzer import PerformanceAnalyzer
from agents.cost_model import CostModel
from agents.risk_assessor import RiskAssessor, CONTINGENCY_PLANS
from models.constraints import OptimizationGoals, ResourceConstraints
from models.schedule import Schedule

from conftest import NOW, make_job, make_machine

LEVELS = ["low", "medium", "high", "critical"]


# Performance

def _two_machine_schedule(due_offset_minutes=None):
    due = NOW + timedelta(minutes=due_offset_minutes) if due_offset_minutes else NOW + timedelta(days=3)
    machines = [make_machine("M1"), make_machine("M2", setup_time_multiplier=1.5)]
    jobs = [make_job("A", due_date=due), make_job("B", due_date=due)]
    schedule = ScheduleBuilder().build(jobs, machines, OptimizationGoals(), NOW)
    return schedule, machines


def test_performance_of_parallel_schedule():
    schedule, machines = _two_machine_schedule()

    metrics = PerformanceAnalyzer().analyze(schedule, machines, NOW)

    # A: 10 + 60 on M1, B: 15 + 60 on M2
    assert metrics.total_makespan == pytest.approx(145 / 60)
    assert metrics.elapsed_makespan == pytest.approx(75 / 60)
    assert metrics.average_wait_time == pytest.approx(145 / 60 * 0.2 / 2)
    assert metrics.average_flow_time == pytest.approx(145 / 60 / 2)
    assert metrics.throughput_rate == pytest.approx(2 / (145 / 60 / 24))
    assert metrics.on_time_delivery_rate == 100.0
    assert metrics.total_tardiness == 0.0


def test_machine_utilization_is_busy_share_of_horizon():
    schedule, machines = _two_machine_schedule()

    metrics = PerformanceAnalyzer().analyze(schedule, machines, NOW)

    assert metrics.utilization_for("M1") == pytest.approx(93.3)
    assert metrics.utilization_for("M2") == pytest.approx(100.0)


def test_unavailable_machine_reports_zero_utilization():
    schedule, machines = _two_machine_schedule()
    machines.append(make_machine("M3", current_status="maintenance"))

    metrics = PerformanceAnalyzer().analyze(schedule, machines, NOW)

    assert metrics.utilization_for("M3") == 0.0
    assert all(0.0 <= m.utilization <= 100.0 for m in metrics.machine_utilization)


def test_on_time_rate_and_tardiness_use_due_dates():
    schedule, machines = _two_machine_schedule(due_offset_minutes=72)

    metrics = PerformanceAnalyzer().analyze(schedule, machines, NOW)

    # A ends at +70 (on time), B ends at +75 (3 minutes late)
    assert metrics.on_time_delivery_rate == pytest.approx(50.0)
    assert metrics.total_tardiness == pytest.approx(3 / 60)
    assert metrics.late_jobs == 1


def test_empty_schedule_gives_zero_metrics():
    metrics = PerformanceAnalyzer().analyze(Schedule(), [make_machine()], NOW)

    assert metrics.total_makespan == 0.0
    assert metrics.on_time_delivery_rate == 0.0
    assert metrics.throughput_rate == 0.0
    assert metrics.utilization_for("M1") == 0.0


def test_utilization_is_deterministic():
    schedule, machines = _two_machine_schedule()
    analyzer = PerformanceAnalyzer()

    first = analyzer.analyze(schedule, machines, NOW).machine_utilization
    second = analyzer.analyze(schedule, machines, NOW).machine_utilization

    assert first == second


# Cost

def test_cost_for_small_queue():
    jobs = [make_job(f"J{i}", setup_time=10) for i in range(3)]

    costs = CostModel().analyze(jobs)

    assert costs.total_operating_cost == 450
    assert costs.overtime_cost == 0
    assert costs.setup_cost == 90
    assert costs.tardiness_penalty == 0
    assert costs.opportunity_cost == 0
    assert costs.profit_optimization == 225
    assert costs.total_cost == 540


def test_overtime_starts_after_five_jobs():
    jobs = [make_job(f"J{i}", setup_time=0) for i in range(7)]

    assert CostModel().analyze(jobs).overtime_cost == 100


def test_cost_breakdown_uses_fixed_percentages():
    costs = CostModel().analyze([make_job(setup_time=10)])

    breakdown = {item.category: item for item in costs.cost_breakdown}
    assert [item.category for item in costs.cost_breakdown] == [
        "Operating Cost", "Setup Cost", "Overtime Cost"
    ]
    assert breakdown["Operating Cost"].percentage == 60
    assert breakdown["Setup Cost"].amount == 30
    assert breakdown["Overtime Cost"].percentage == 15
    assert costs.to_dict()["totalCost"] == 180


# Risk

@pytest.mark.parametrize("urgent, jobs, machines, expected", [
    (0, 5, 3, "low"),
    (3, 5, 3, "medium"),
    (0, 9, 3, "medium"),
    (4, 5, 3, "high"),
    (0, 13, 3, "high"),
    (0, 5, 1, "high"),
    (6, 5, 3, "critical"),
    (0, 16, 3, "critical"),
    (0, 5, 0, "critical"),
])
def test_risk_ladder(urgent, jobs, machines, expected):
    assert RiskAssessor().classify(urgent, jobs, machines) == expected


def test_risk_is_monotone_in_job_count():
    assessor = RiskAssessor()
    levels = [LEVELS.index(assessor.classify(0, n, 3)) for n in range(0, 30)]
    assert levels == sorted(levels)


def test_risk_is_monotone_in_urgent_jobs():
    assessor = RiskAssessor()
    levels = [LEVELS.index(assessor.classify(u, 5, 3)) for u in range(0, 10)]
    assert levels == sorted(levels)


def test_risk_is_monotone_in_fewer_machines():
    assessor = RiskAssessor()
    levels = [LEVELS.index(assessor.classify(0, 5, m)) for m in range(5, -1, -1)]
    assert levels == sorted(levels)


def test_risk_factors():
    factors = RiskAssessor().risk_factors(
        urgent_jobs=3, job_count=11, available_machines=1, available_operators=2
    )

    assert factors == [
        "High number of urgent jobs in queue",
        "Large job queue may cause delays",
        "Limited machine availability",
        "Insufficient operator coverage",
    ]


def test_no_risk_factors_for_quiet_queue():
    assert RiskAssessor().risk_factors(0, 3, 3, 3) == []


@pytest.mark.parametrize("job_count, expected", [(0, 100), (5, 85), (13, 61), (14, 60), (30, 60)])
def test_buffer_adequacy(job_count, expected):
    assert RiskAssessor().buffer_adequacy(job_count) == expected


def test_assess_reports_delivery_risk_and_buffers(jobs, machines):
    schedule = ScheduleBuilder().build(jobs, machines, OptimizationGoals(), NOW)

    risk = RiskAssessor().assess(jobs, machines, ResourceConstraints(available_operators=3), schedule)

    assert risk.schedule_risk == "low"
    assert risk.contingency_plans == CONTINGENCY_PLANS
    assert [(d.job_id, d.risk_level) for d in risk.delivery_risk] == [("J002", "high")]
    assert len(risk.buffer_recommendations) == len(jobs)
    by_id = {b.job_id: b for b in risk.buffer_recommendations}
    assert by_id["J001"].recommended_buffer == 15.0
