"""
Analysis Models - Read-only aggregates derived from one optimizer run

This module defines the result types produced after the schedule is built:
performance metrics, resource utilization, cost analysis, risk assessment,
alternative scenarios, insights, alerts and customer impact, plus the
OptimizationResult bundle that carries them all to the dashboard.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Dict, Any, Optional

from models.schedule import Schedule
from models.policy import RealTimeAdjustments


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def camel_dict(value: Any) -> Any:
    """Recursively convert dataclasses/dicts to dicts with camelCase keys."""
    if hasattr(value, "__dataclass_fields__"):
        value = asdict(value)
    if isinstance(value, dict):
        return {_camel(k): camel_dict(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [camel_dict(v) for v in value]
    if isinstance(value, float):
        return round(value, 2)
    return value


@dataclass
class MachineUtilization:
    machine_id: str
    utilization: float  # percent of the schedule horizon spent busy


@dataclass
class PerformanceMetrics:
    """
    Schedule performance figures.

    ``total_makespan`` is the summed machine time (setup + cutting) in hours;
    ``elapsed_makespan`` is first start to last completion in hours.
    """

    total_makespan: float = 0.0
    average_wait_time: float = 0.0        # hours
    machine_utilization: List[MachineUtilization] = field(default_factory=list)
    on_time_delivery_rate: float = 0.0    # percent
    total_tardiness: float = 0.0          # hours
    throughput_rate: float = 0.0          # jobs per day
    average_flow_time: float = 0.0        # hours
    elapsed_makespan: float = 0.0         # hours
    late_jobs: int = 0
    job_count: int = 0

    def utilization_for(self, machine_id: str) -> float:
        return next(
            (m.utilization for m in self.machine_utilization if m.machine_id == machine_id), 0.0
        )

    @property
    def average_utilization(self) -> float:
        if not self.machine_utilization:
            return 0.0
        return sum(m.utilization for m in self.machine_utilization) / len(self.machine_utilization)

    def __str__(self) -> str:
        return (f"PerformanceMetrics(Makespan: {self.total_makespan:.1f}h, "
                f"Elapsed: {self.elapsed_makespan:.1f}h, "
                f"On-time: {self.on_time_delivery_rate:.1f}%, "
                f"Tardiness: {self.total_tardiness:.1f}h)")


@dataclass
class MachineEfficiency:
    machine_id: str
    efficiency: float
    utilization: float
    bottleneck: bool = False


@dataclass
class MaterialUsage:
    material_type: str
    demand: float
    available: float
    utilization: float
    shortage: bool = False


@dataclass
class ToolingStatus:
    tool_type: str
    available: bool
    setup_time: float


@dataclass
class ShiftCoverage:
    shift_id: str
    coverage: float
    overtime: bool = False


@dataclass
class BottleneckEntry:
    resource: str
    utilization_rate: float
    impact: str


@dataclass
class ResourceUtilization:
    operator_utilization: float = 0.0
    machine_efficiency: List[MachineEfficiency] = field(default_factory=list)
    material_usage: List[MaterialUsage] = field(default_factory=list)
    tooling_utilization: List[ToolingStatus] = field(default_factory=list)
    shift_coverage: List[ShiftCoverage] = field(default_factory=list)
    equipment_efficiency: float = 0.0
    bottleneck_analysis: List[BottleneckEntry] = field(default_factory=list)

    @property
    def bottleneck_machines(self) -> List[str]:
        return [m.machine_id for m in self.machine_efficiency if m.bottleneck]


@dataclass
class CostBreakdownItem:
    category: str
    amount: float
    percentage: float


@dataclass
class CostAnalysis:
    """Linear cost heuristic for the schedule period (dollars)."""

    total_operating_cost: float = 0.0
    overtime_cost: float = 0.0
    setup_cost: float = 0.0
    tardiness_penalty: float = 0.0
    opportunity_cost: float = 0.0
    profit_optimization: float = 0.0
    cost_breakdown: List[CostBreakdownItem] = field(default_factory=list)

    @property
    def total_cost(self) -> float:
        return (self.total_operating_cost + self.overtime_cost + self.setup_cost
                + self.tardiness_penalty + self.opportunity_cost)

    def to_dict(self) -> Dict[str, Any]:
        data = camel_dict(self)
        data["totalCost"] = round(self.total_cost, 2)
        return data


@dataclass
class DeliveryRisk:
    job_id: str
    risk_level: str
    mitigation: str


@dataclass
class BufferRecommendation:
    job_id: str
    recommended_buffer: float
    reason: str


@dataclass
class RiskAssessment:
    schedule_risk: str = "low"  # low / medium / high / critical
    risk_factors: List[str] = field(default_factory=list)
    contingency_plans: List[str] = field(default_factory=list)
    buffer_adequacy: float = 100.0
    delivery_risk: List[DeliveryRisk] = field(default_factory=list)
    buffer_recommendations: List[BufferRecommendation] = field(default_factory=list)
    urgent_jobs: int = 0
    available_machines: int = 0


@dataclass
class Scenario:
    """An alternative schedule produced by re-running with other goal weights."""
    scenario_name: str
    description: str
    makespan: float          # elapsed hours
    on_time_rate: float      # percent
    total_cost: float        # dollars
    tradeoffs: List[str] = field(default_factory=list)
    total_work_hours: float = 0.0
    job_order: List[str] = field(default_factory=list)


@dataclass
class OptimizationInsights:
    improvement_areas: List[str] = field(default_factory=list)
    bottleneck_identification: List[str] = field(default_factory=list)
    capacity_recommendations: List[str] = field(default_factory=list)
    process_improvements: List[str] = field(default_factory=list)
    scheduling_strategies: List[str] = field(default_factory=list)


@dataclass
class AlertsAndRecommendations:
    urgent_actions: List[str] = field(default_factory=list)
    capacity_warnings: List[str] = field(default_factory=list)
    quality_alerts: List[str] = field(default_factory=list)
    efficiency_improvements: List[str] = field(default_factory=list)
    scheduling_tips: List[str] = field(default_factory=list)


@dataclass
class TierDelivery:
    customer_tier: str
    job_count: int
    on_time_rate: float
    satisfaction: float  # 1-10 scale


@dataclass
class CustomerNotification:
    job_id: str
    customer_notification: str
    timing: str


@dataclass
class CustomerImpact:
    customer_satisfaction_score: float = 0.0  # 1-10 scale
    delivery_performance: List[TierDelivery] = field(default_factory=list)
    communication_plan: List[CustomerNotification] = field(default_factory=list)


@dataclass
class ScheduleValidation:
    is_valid: bool = True
    violations: List[str] = field(default_factory=list)
    report: str = ""


@dataclass
class OptimizationResult:
    """
    The output bundle of one optimize() call.

    Consumed by the results dashboard and the export tools; ``to_dict``
    produces the camelCase layout they expect.
    """

    schedule: Schedule
    performance: PerformanceMetrics
    resources: ResourceUtilization
    costs: CostAnalysis
    risk: RiskAssessment
    insights: OptimizationInsights
    scenarios: List[Scenario]
    real_time_adjustments: RealTimeAdjustments
    customer_impact: CustomerImpact
    alerts: AlertsAndRecommendations
    validation: ScheduleValidation = field(default_factory=ScheduleValidation)
    recommendations: List[str] = field(default_factory=list)
    explanation: str = ""
    generated_at: Optional[datetime] = None

    def key_metrics(self) -> Dict[str, str]:
        """Headline figures for the dashboard banner."""
        return {
            "Total Makespan": f"{self.performance.total_makespan:.1f} hours",
            "On-Time Rate": f"{self.performance.on_time_delivery_rate:.1f}%",
            "Avg Utilization": f"{self.performance.average_utilization:.1f}%",
            "Schedule Risk": self.risk.schedule_risk,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to the dashboard's dictionary layout."""
        return {
            "optimizedSchedule": [sj.to_dict() for sj in self.schedule.scheduled_jobs],
            "unassignableJobs": [u.to_dict() for u in self.schedule.unassignable],
            "performanceMetrics": camel_dict(self.performance),
            "resourceUtilization": camel_dict(self.resources),
            "costAnalysis": self.costs.to_dict(),
            "riskAssessment": camel_dict(self.risk),
            "optimizationInsights": camel_dict(self.insights),
            "alternativeSchedules": camel_dict(self.scenarios),
            "realTimeAdjustments": self.real_time_adjustments.to_dict(),
            "customerImpact": camel_dict(self.customer_impact),
            "alertsAndRecommendations": camel_dict(self.alerts),
            "scheduleValidation": {
                "isValid": self.validation.is_valid,
                "violations": list(self.validation.violations),
            },
            "recommendations": list(self.recommendations),
            "keyMetrics": self.key_metrics(),
            "explanation": self.explanation,
            "generatedAt": self.generated_at.isoformat() if self.generated_at else None,
        }

    def __str__(self) -> str:
        return (f"OptimizationResult({len(self.schedule)} jobs scheduled, "
                f"risk={self.risk.schedule_risk}, {self.performance})")
