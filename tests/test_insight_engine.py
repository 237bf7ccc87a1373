from datetime import time, timedelta

import pytest

from agents.schedule_builder import ScheduleBuilder
from agents.performance_analyzer import PerformanceAnalyzer
from agents.cost_model import CostModel
from agents.risk_assessor import RiskAssessor
from agents.resource_analyzer import ResourceAnalyzer
from agents.insight_engine import InsightEngine, InsightContext, InsightRule
from models.constraints import MaterialAvailability, OperationalConstraints, ResourceConstraints
from models.policy import SchedulingPolicy
from models.request import OptimizationRequest

from conftest import NOW, make_job, make_machine


def build_context(request, baseline_elapsed=None, policy=None) -> InsightContext:
    policy = policy or SchedulingPolicy()
    schedule = ScheduleBuilder().build(request.jobs, request.machines, request.goals, NOW)
    performance = PerformanceAnalyzer().analyze(schedule, request.machines, NOW)
    return InsightContext(
        request=request,
        schedule=schedule,
        performance=performance,
        resources=ResourceAnalyzer(policy).analyze(request, schedule, performance, NOW),
        costs=CostModel().analyze(request.jobs),
        risk=RiskAssessor().assess(request.jobs, request.machines, request.resources, schedule),
        baseline_elapsed=baseline_elapsed,
        policy=policy,
    )


@pytest.fixture
def quiet_request():
    """Two short, setup-free jobs on two identical machines with plenty of staff."""
    return OptimizationRequest(
        jobs=[
            make_job("A", setup_time=0, estimated_duration=30),
            make_job("B", setup_time=0, estimated_duration=30),
        ],
        machines=[make_machine("M1"), make_machine("M2")],
        resources=ResourceConstraints(available_operators=3),
    )


def _all_messages(engine, ctx):
    insights = engine.generate_insights(ctx)
    alerts = engine.generate_alerts(ctx)
    messages = []
    for group in (insights, alerts):
        for values in vars(group).values():
            messages.extend(values)
    return messages


def test_quiet_schedule_has_no_urgent_actions(quiet_request):
    ctx = build_context(quiet_request)
    engine = InsightEngine()

    alerts = engine.generate_alerts(ctx)

    assert alerts.urgent_actions == []
    # both machines are busy for the whole 30 minute horizon
    assert alerts.capacity_warnings == [
        "Machine M1 utilization at 100%",
        "Machine M2 utilization at 100%",
    ]
    assert engine.generate_insights(ctx).improvement_areas == []
    assert engine.generate_recommendations(ctx) == ["Offload work from M1"]


def test_late_job_messages_only_when_jobs_are_late(quiet_request):
    engine = InsightEngine()
    on_time = _all_messages(engine, build_context(quiet_request))

    quiet_request.jobs[0] = make_job("A", setup_time=0, estimated_duration=30,
                                     priority="urgent", due_date=NOW + timedelta(minutes=10))
    late = _all_messages(engine, build_context(quiet_request))

    assert not any("after their due date" in m for m in on_time)
    assert any("1 job(s) finish after their due date" in m for m in late)
    assert any(m.startswith("Expedite A: urgent job finishes 20 min late") for m in late)


def test_setup_share_rules(quiet_request):
    engine = InsightEngine()
    assert "Machine setup time is primary constraint" not in (
        engine.generate_insights(build_context(quiet_request)).bottleneck_identification
    )

    quiet_request.jobs = [make_job("A", setup_time=30, estimated_duration=30)]
    insights = engine.generate_insights(build_context(quiet_request))

    assert "Machine setup time is primary constraint" in insights.bottleneck_identification
    assert insights.improvement_areas[0].startswith("Reduce setup times")


def test_setup_share_threshold_comes_from_policy(quiet_request):
    # half of the machine time is setup
    quiet_request.jobs = [make_job("A", setup_time=30, estimated_duration=30)]
    ctx = build_context(quiet_request, policy=SchedulingPolicy(setup_share_threshold=60))

    insights = InsightEngine().generate_insights(ctx)

    assert ctx.setup_share == 50.0
    assert "Setup time" not in [e.resource for e in ctx.resources.bottleneck_analysis]
    assert "Machine setup time is primary constraint" not in insights.bottleneck_identification
    assert not any(a.startswith("Reduce setup times") for a in insights.improvement_areas)


def test_overnight_window_is_not_shorter_than_the_schedule(quiet_request):
    quiet_request.operational_constraints = OperationalConstraints(
        working_hours_start=time(22, 0), working_hours_end=time(6, 0)
    )
    ctx = build_context(quiet_request)

    messages = _all_messages(InsightEngine(), ctx)

    assert not ctx.exceeds_working_day
    assert not any("longer than one working day" in m for m in messages)
    assert "Potential overtime required for on-time delivery" not in messages


def test_unassignable_and_shortage_alerts(quiet_request):
    quiet_request.jobs.append(make_job("TI", material_type="titanium"))
    quiet_request.resources.material_availability = [MaterialAvailability("mild_steel", 5)]

    ctx = build_context(quiet_request)
    alerts = InsightEngine().generate_alerts(ctx)
    recommendations = InsightEngine().generate_recommendations(ctx)

    assert any(a.startswith("Resolve TI:") for a in alerts.urgent_actions)
    assert "Order mild_steel: demand 20 exceeds stock 5" in alerts.urgent_actions
    assert "Add or free a machine able to cut: titanium" in recommendations


def test_operator_rules(quiet_request):
    quiet_request.resources.available_operators = 1
    ctx = build_context(quiet_request)

    insights = InsightEngine().generate_insights(ctx)
    alerts = InsightEngine().generate_alerts(ctx)

    assert any(r.startswith("Cross-train operators") for r in insights.capacity_recommendations)
    assert "Operator coverage below 3 operators" in alerts.capacity_warnings


def test_baseline_gain_is_reported(quiet_request):
    ctx = build_context(quiet_request, baseline_elapsed=2.0)

    insights = InsightEngine().generate_insights(ctx)

    assert any("1.5h earlier" in s for s in insights.scheduling_strategies)


def test_no_baseline_gain_without_baseline(quiet_request):
    ctx = build_context(quiet_request)

    assert ctx.baseline_gain == 0.0


def test_custom_rule_tables():
    rule = InsightRule("scheduling_tips", lambda c: True, lambda c: ["one", "two"])
    never = InsightRule("scheduling_tips", lambda c: False, lambda c: "never")
    engine = InsightEngine(insight_rules=[], alert_rules=[rule, never], recommendation_rules=[])
    request = OptimizationRequest(jobs=[make_job()], machines=[make_machine()])

    ctx = build_context(request)

    assert engine.generate_alerts(ctx).scheduling_tips == ["one", "two"]
    assert engine.generate_insights(ctx).improvement_areas == []
    assert engine.generate_recommendations(ctx) == [
        "Schedule is on track; release it to the shop floor"
    ]
