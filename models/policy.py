"""
Scheduling Policy - Tunable constants of the optimizer

Every weight, threshold and rate the engine uses lives here so that shops
can override them through ``config/default_policy.yaml`` without touching
code. The dataclass defaults match the shipped YAML file.
"""

from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field


UNASSIGNABLE_POLICIES = ("flag", "fallback")


@dataclass
class CostRates:
    """Flat per-job cost heuristic rates (dollars)."""
    cost_per_job: float = 150.0
    overtime_job_threshold: int = 5       # jobs beyond this count incur overtime
    overtime_cost_per_job: float = 50.0
    setup_cost_per_minute: float = 3.0
    optimization_benefit_per_job: float = 75.0
    breakdown_percentages: Dict[str, float] = field(default_factory=lambda: {
        "Operating Cost": 60.0,
        "Setup Cost": 25.0,
        "Overtime Cost": 15.0,
    })


@dataclass
class RiskThresholds:
    """Thresholds of the schedule risk ladder."""
    medium_urgent_jobs: int = 2
    medium_job_count: int = 8
    high_urgent_jobs: int = 3
    high_job_count: int = 12
    high_min_machines: int = 2
    critical_urgent_jobs: int = 5
    critical_job_count: int = 15
    critical_min_machines: int = 1
    large_queue: int = 10
    min_operators: int = 3
    buffer_adequacy_floor: float = 60.0
    buffer_penalty_per_job: float = 3.0


@dataclass
class ScenarioProfile:
    """
    One alternative schedule: a name plus the goal weights it re-runs with.

    ``weights`` of None means "use the caller's goals unchanged".
    """
    name: str
    description: str
    weights: Optional[Dict[str, float]] = None
    tradeoffs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "weights": self.weights,
            "tradeoffs": list(self.tradeoffs),
        }


def default_scenarios() -> List[ScenarioProfile]:
    return [
        ScenarioProfile(
            name="Minimum Makespan",
            description="Optimized for fastest completion",
            weights={
                "customer_satisfaction_weight": 0.0,
                "profitability_weight": 0.0,
                "efficiency_weight": 1.0,
                "urgency_weight": 1.0,
            },
            tradeoffs=["Higher machine utilization", "Less flexibility"],
        ),
        ScenarioProfile(
            name="Maximum Profit",
            description="Optimized for profitability",
            weights={
                "customer_satisfaction_weight": 0.1,
                "profitability_weight": 1.0,
                "efficiency_weight": 0.2,
                "urgency_weight": 0.1,
            },
            tradeoffs=["Longer completion time", "Higher profit margins"],
        ),
        ScenarioProfile(
            name="Balanced Approach",
            description="Balance of time, cost, and quality",
            weights=None,
            tradeoffs=["Moderate performance across all metrics"],
        ),
    ]


@dataclass
class RealTimeAdjustments:
    """
    Rescheduling triggers and strategies handed to the dashboard.

    Static configuration; the engine never executes it.
    """
    dynamic_rescheduling: bool = True
    trigger_conditions: List[str] = field(default_factory=lambda: [
        "Machine breakdown or unexpected downtime",
        "Rush order insertion",
        "Material availability changes",
        "Quality issues requiring rework",
    ])
    adjustment_strategies: List[str] = field(default_factory=lambda: [
        "Automatic job resequencing",
        "Load balancing across machines",
        "Priority escalation protocols",
        "Resource reallocation",
    ])
    monitoring_parameters: List[str] = field(default_factory=lambda: [
        "Real-time machine status",
        "Job progress tracking",
        "Quality metrics",
        "Resource availability",
    ])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dynamicRescheduling": self.dynamic_rescheduling,
            "triggerConditions": list(self.trigger_conditions),
            "adjustmentStrategies": list(self.adjustment_strategies),
            "monitoringParameters": list(self.monitoring_parameters),
        }


@dataclass
class SchedulingPolicy:
    """
    All tunable constants of one optimizer instance.

    Example:
        >>> policy = SchedulingPolicy(unassignable_policy="fallback")
        >>> policy.priority_weight("critical")
        10.0
    """

    # Priority scoring
    priority_weights: Dict[str, float] = field(default_factory=lambda: {
        "critical": 10.0, "urgent": 8.0, "high": 6.0, "normal": 4.0, "low": 2.0,
    })
    default_priority_weight: float = 4.0
    customer_weights: Dict[str, float] = field(default_factory=lambda: {
        "vip": 1.5, "preferred": 1.2, "standard": 1.0,
    })
    default_customer_weight: float = 1.0
    # (hours until due, weight) bands checked in order; first band the job falls under wins
    urgency_bands: List[Tuple[float, float]] = field(default_factory=lambda: [
        (24.0, 10.0), (48.0, 8.0), (72.0, 6.0), (168.0, 4.0),
    ])
    default_urgency_weight: float = 2.0
    urgency_multiplier: float = 5.0
    profit_multiplier: float = 10.0

    # Sequencing
    min_buffer_minutes: float = 5.0
    buffer_ratio: float = 0.1
    unassignable_policy: str = "flag"
    enforce_dependencies: bool = False

    # Analysis
    bottleneck_utilization: float = 85.0
    setup_share_threshold: float = 15.0   # percent of machine time spent on setup
    cost: CostRates = field(default_factory=CostRates)
    risk: RiskThresholds = field(default_factory=RiskThresholds)
    scenarios: List[ScenarioProfile] = field(default_factory=default_scenarios)
    real_time_adjustments: RealTimeAdjustments = field(default_factory=RealTimeAdjustments)

    def __post_init__(self):
        if self.unassignable_policy not in UNASSIGNABLE_POLICIES:
            raise ValueError(
                f"unassignable_policy must be one of {UNASSIGNABLE_POLICIES}, "
                f"got: {self.unassignable_policy}"
            )

    def priority_weight(self, tier: str) -> float:
        return self.priority_weights.get(tier, self.default_priority_weight)

    def customer_weight(self, tier: str) -> float:
        return self.customer_weights.get(tier, self.default_customer_weight)

    def buffer_minutes(self, estimated_duration: float) -> float:
        return max(self.min_buffer_minutes, estimated_duration * self.buffer_ratio)
