"""
Insight Engine

Rule-driven insights, alerts and recommendations for a finished run.

Every rule is a (category, predicate, message) triple evaluated over an
InsightContext holding the schedule and all computed analyses. A message is
emitted only when its predicate holds, so a clean schedule yields short
lists and a troubled one explains itself.

Does NOT use LLM - the optional narrative lives in the SupervisorAgent.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Union

from models.request import OptimizationRequest
from models.policy import SchedulingPolicy
from models.schedule import Schedule
from models.analysis import (
    PerformanceMetrics,
    ResourceUtilization,
    CostAnalysis,
    RiskAssessment,
    ScheduleValidation,
    OptimizationInsights,
    AlertsAndRecommendations,
)

UTILIZATION_SPREAD_THRESHOLD = 30.0   # percentage points between machines
HIGH_UTILIZATION = 90.0
LOW_BUFFER_ADEQUACY = 75.0
LOW_MACHINE_EFFICIENCY = 85.0
COMPLEX_JOB_MINUTES = 120.0


@dataclass
class InsightContext:
    """Everything the rules may look at."""

    request: OptimizationRequest
    schedule: Schedule
    performance: PerformanceMetrics
    resources: ResourceUtilization
    costs: CostAnalysis
    risk: RiskAssessment
    validation: Optional[ScheduleValidation] = None
    baseline_elapsed: Optional[float] = None  # hours, single-line reference schedule
    policy: SchedulingPolicy = field(default_factory=SchedulingPolicy)

    @property
    def setup_share(self) -> float:
        """Setup minutes as a percentage of all machine time."""
        total = self.schedule.total_work_minutes()
        if total <= 0:
            return 0.0
        return sum(sj.setup_time for sj in self.schedule) / total * 100

    @property
    def available_utilization(self) -> List[float]:
        return [
            self.performance.utilization_for(m.machine_id)
            for m in self.request.available_machines
        ]

    @property
    def utilization_spread(self) -> float:
        values = self.available_utilization
        if len(values) < 2:
            return 0.0
        return max(values) - min(values)

    @property
    def late_jobs(self):
        return [sj for sj in self.schedule if sj.is_late()]

    @property
    def late_urgent_jobs(self):
        return [sj for sj in self.late_jobs if sj.job.is_urgent]

    @property
    def shortages(self):
        return [m for m in self.resources.material_usage if m.shortage]

    @property
    def unavailable_machines(self):
        return [m for m in self.request.machines if not m.is_available]

    @property
    def materials(self) -> List[str]:
        return sorted({job.material_type for job in self.request.jobs})

    @property
    def baseline_gain(self) -> float:
        """Elapsed hours saved against the single-line reference schedule."""
        if self.baseline_elapsed is None or self.schedule.is_empty:
            return 0.0
        return self.baseline_elapsed - self.schedule.elapsed_hours()

    @property
    def exceeds_working_day(self) -> bool:
        window_hours = self.request.operational_constraints.get_working_window_minutes() / 60
        return self.schedule.elapsed_hours() > window_hours


Message = Callable[[InsightContext], Union[str, List[str]]]


@dataclass(frozen=True)
class InsightRule:
    category: str
    predicate: Callable[[InsightContext], bool]
    message: Message

    def render(self, ctx: InsightContext) -> List[str]:
        text = self.message(ctx)
        return [text] if isinstance(text, str) else list(text)


def _ids(items) -> str:
    return ", ".join(items)


INSIGHT_RULES = [
    # Improvement areas
    InsightRule(
        "improvement_areas",
        lambda c: c.setup_share >= c.policy.setup_share_threshold,
        lambda c: f"Reduce setup times through better job sequencing "
                  f"({c.setup_share:.0f}% of machine time is setup)",
    ),
    InsightRule(
        "improvement_areas",
        lambda c: c.utilization_spread > UTILIZATION_SPREAD_THRESHOLD,
        lambda c: f"Improve machine utilization balance "
                  f"({max(c.available_utilization):.0f}% vs {min(c.available_utilization):.0f}%)",
    ),
    InsightRule(
        "improvement_areas",
        lambda c: bool(c.shortages),
        lambda c: f"Optimize material flow and inventory management "
                  f"(short: {_ids(m.material_type for m in c.shortages)})",
    ),
    InsightRule(
        "improvement_areas",
        lambda c: bool(c.late_jobs),
        lambda c: f"{len(c.late_jobs)} job(s) finish after their due date; "
                  f"review sequencing or add capacity",
    ),
    # Bottlenecks
    InsightRule(
        "bottleneck_identification",
        lambda c: bool(c.resources.bottleneck_machines),
        lambda c: [
            f"Machine {m.machine_id} is the bottleneck at {m.utilization:.0f}% utilization"
            for m in c.resources.machine_efficiency if m.bottleneck
        ],
    ),
    InsightRule(
        "bottleneck_identification",
        lambda c: c.setup_share >= c.policy.setup_share_threshold,
        lambda c: "Machine setup time is primary constraint",
    ),
    InsightRule(
        "bottleneck_identification",
        lambda c: bool(c.schedule.unassignable),
        lambda c: f"{len(c.schedule.unassignable)} job(s) have no compatible available machine",
    ),
    InsightRule(
        "bottleneck_identification",
        lambda c: bool(c.unavailable_machines),
        lambda c: f"{len(c.unavailable_machines)} machine(s) out of service: "
                  f"{_ids(m.machine_id for m in c.unavailable_machines)}",
    ),
    # Capacity
    InsightRule(
        "capacity_recommendations",
        lambda c: c.risk.schedule_risk in ("high", "critical"),
        lambda c: "Consider adding one more machine for peak periods",
    ),
    InsightRule(
        "capacity_recommendations",
        lambda c: c.request.resources.available_operators < len(c.request.available_machines),
        lambda c: f"Cross-train operators for better flexibility "
                  f"({c.request.resources.available_operators} operator(s) for "
                  f"{len(c.request.available_machines)} machines)",
    ),
    InsightRule(
        "capacity_recommendations",
        lambda c: c.exceeds_working_day,
        lambda c: f"Schedule runs {c.schedule.elapsed_hours():.1f}h, longer than one working "
                  f"day; plan overtime or a second shift",
    ),
    # Process
    InsightRule(
        "process_improvements",
        lambda c: any(m.setup_time_multiplier > 1.0 for m in c.request.available_machines),
        lambda c: "Standardize setup procedures across machines ("
                  + _ids(m.machine_id for m in c.request.available_machines
                         if m.setup_time_multiplier > 1.0)
                  + " above nominal setup)",
    ),
    InsightRule(
        "process_improvements",
        lambda c: bool(c.request.operational_constraints.maintenance_windows),
        lambda c: f"Use predictive maintenance around the "
                  f"{len(c.request.operational_constraints.maintenance_windows)} "
                  f"configured maintenance window(s)",
    ),
    InsightRule(
        "process_improvements",
        lambda c: len(c.materials) > 1 and c.setup_share >= c.policy.setup_share_threshold,
        lambda c: f"Group jobs by material to cut changeovers ({len(c.materials)} materials in queue)",
    ),
    # Strategies
    InsightRule(
        "scheduling_strategies",
        lambda c: c.request.urgent_job_count > 0,
        lambda c: f"Use dynamic scheduling for urgent jobs "
                  f"({c.request.urgent_job_count} urgent or critical in queue)",
    ),
    InsightRule(
        "scheduling_strategies",
        lambda c: c.baseline_gain > 0,
        lambda c: f"Parallel machine sequencing finishes {c.baseline_gain:.1f}h earlier "
                  f"than a single shared line",
    ),
    InsightRule(
        "scheduling_strategies",
        lambda c: bool(c.late_jobs),
        lambda c: "Expedite late jobs or renegotiate their due dates",
    ),
]

ALERT_RULES = [
    InsightRule(
        "urgent_actions",
        lambda c: bool(c.late_urgent_jobs),
        lambda c: [
            f"Expedite {sj.job_id}: {sj.job.priority} job finishes "
            f"{sj.get_tardiness_minutes():.0f} min late"
            for sj in c.late_urgent_jobs
        ],
    ),
    InsightRule(
        "urgent_actions",
        lambda c: bool(c.schedule.unassignable),
        lambda c: [f"Resolve {u.job.job_id}: {u.reason}" for u in c.schedule.unassignable],
    ),
    InsightRule(
        "urgent_actions",
        lambda c: bool(c.shortages),
        lambda c: [
            f"Order {m.material_type}: demand {m.demand:g} exceeds stock {m.available:g}"
            for m in c.shortages
        ],
    ),
    InsightRule(
        "urgent_actions",
        lambda c: c.validation is not None and not c.validation.is_valid,
        lambda c: f"Review {len(c.validation.violations)} schedule constraint "
                  f"violation(s) before release",
    ),
    InsightRule(
        "capacity_warnings",
        lambda c: any(u >= HIGH_UTILIZATION for u in c.available_utilization),
        lambda c: [
            f"Machine {m.machine_id} utilization at {m.utilization:.0f}%"
            for m in c.performance.machine_utilization if m.utilization >= HIGH_UTILIZATION
        ],
    ),
    InsightRule(
        "capacity_warnings",
        lambda c: c.risk.buffer_adequacy < LOW_BUFFER_ADEQUACY,
        lambda c: f"Limited buffer time for high-priority jobs "
                  f"(buffer adequacy {c.risk.buffer_adequacy:.0f}%)",
    ),
    InsightRule(
        "capacity_warnings",
        lambda c: c.exceeds_working_day,
        lambda c: "Potential overtime required for on-time delivery",
    ),
    InsightRule(
        "capacity_warnings",
        lambda c: c.request.resources.available_operators < c.policy.risk.min_operators,
        lambda c: f"Operator coverage below {c.policy.risk.min_operators} operators",
    ),
    InsightRule(
        "quality_alerts",
        lambda c: c.request.quality.quality_check_time > 0 and not c.schedule.is_empty,
        lambda c: f"Quality checks add {c.request.quality.quality_check_time * len(c.schedule):g} "
                  f"min not included in the schedule",
    ),
    InsightRule(
        "quality_alerts",
        lambda c: c.request.quality.inspection_requirements == "full",
        lambda c: "Full inspection required; plan inspection capacity alongside cutting",
    ),
    InsightRule(
        "quality_alerts",
        lambda c: c.setup_share >= c.policy.setup_share_threshold,
        lambda c: "Monitor setup time accuracy for schedule reliability",
    ),
    InsightRule(
        "efficiency_improvements",
        lambda c: len(c.materials) > 1,
        lambda c: "Group similar materials to reduce setup time",
    ),
    InsightRule(
        "efficiency_improvements",
        lambda c: any(m.efficiency < LOW_MACHINE_EFFICIENCY for m in c.request.available_machines),
        lambda c: [
            f"Machine {m.machine_id} runs at {m.efficiency:.0f}% efficiency; schedule maintenance"
            for m in c.request.available_machines if m.efficiency < LOW_MACHINE_EFFICIENCY
        ],
    ),
    InsightRule(
        "scheduling_tips",
        lambda c: c.request.urgent_job_count > 0,
        lambda c: "Schedule high-priority jobs during peak efficiency hours",
    ),
    InsightRule(
        "scheduling_tips",
        lambda c: any(job.estimated_duration > COMPLEX_JOB_MINUTES for job in c.request.jobs),
        lambda c: "Build in buffer time for complex jobs",
    ),
    InsightRule(
        "scheduling_tips",
        lambda c: c.risk.schedule_risk != "low",
        lambda c: "Monitor real-time progress for dynamic adjustments",
    ),
]

RECOMMENDATION_RULES = [
    InsightRule(
        "recommendations",
        lambda c: bool(c.late_jobs),
        lambda c: f"Resequence or add capacity: {len(c.late_jobs)} job(s) projected late",
    ),
    InsightRule(
        "recommendations",
        lambda c: bool(c.schedule.unassignable),
        lambda c: "Add or free a machine able to cut: "
                  + _ids(sorted({u.job.material_type for u in c.schedule.unassignable})),
    ),
    InsightRule(
        "recommendations",
        lambda c: bool(c.resources.bottleneck_machines),
        lambda c: f"Offload work from {_ids(c.resources.bottleneck_machines)}",
    ),
    InsightRule(
        "recommendations",
        lambda c: c.baseline_gain > 0,
        lambda c: f"Adopt the optimized schedule ({c.baseline_gain:.1f}h shorter than "
                  f"single-line sequencing)",
    ),
    InsightRule(
        "recommendations",
        lambda c: c.risk.schedule_risk in ("high", "critical"),
        lambda c: f"Schedule risk is {c.risk.schedule_risk}; prepare contingency plans",
    ),
]


class InsightEngine:
    """Evaluates rule tables against one run's context."""

    def __init__(
        self,
        insight_rules: Optional[List[InsightRule]] = None,
        alert_rules: Optional[List[InsightRule]] = None,
        recommendation_rules: Optional[List[InsightRule]] = None
    ):
        self.insight_rules = INSIGHT_RULES if insight_rules is None else insight_rules
        self.alert_rules = ALERT_RULES if alert_rules is None else alert_rules
        self.recommendation_rules = (
            RECOMMENDATION_RULES if recommendation_rules is None else recommendation_rules
        )

    @staticmethod
    def _apply(rules: List[InsightRule], ctx: InsightContext, target) -> None:
        for rule in rules:
            if rule.predicate(ctx):
                getattr(target, rule.category).extend(rule.render(ctx))

    def generate_insights(self, ctx: InsightContext) -> OptimizationInsights:
        insights = OptimizationInsights()
        self._apply(self.insight_rules, ctx, insights)
        return insights

    def generate_alerts(self, ctx: InsightContext) -> AlertsAndRecommendations:
        alerts = AlertsAndRecommendations()
        self._apply(self.alert_rules, ctx, alerts)
        return alerts

    def generate_recommendations(self, ctx: InsightContext) -> List[str]:
        """
        Short action list for the planner.

        Falls back to a single release message when no rule fires.
        """
        recommendations = []
        for rule in self.recommendation_rules:
            if rule.predicate(ctx):
                recommendations.extend(rule.render(ctx))
        if not recommendations:
            recommendations.append("Schedule is on track; release it to the shop floor")
        return recommendations

    def __str__(self) -> str:
        return (f"InsightEngine({len(self.insight_rules)} insight, "
                f"{len(self.alert_rules)} alert, "
                f"{len(self.recommendation_rules)} recommendation rules)")
