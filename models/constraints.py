"""
Constraint Models - Operational, resource and goal settings for a run

This module defines the shop-floor constraints and optimization goals that
accompany a job queue:
    - OperationalConstraints: working hours, breaks, maintenance windows
    - ResourceConstraints: operators, shifts, material and tooling stock
    - OptimizationGoals: primary objective and the four scoring weights
    - QualityRequirements: inspection settings (informational)
"""

from datetime import time
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field

from models.job import pick


OBJECTIVES = (
    "minimize_makespan",
    "maximize_throughput",
    "minimize_tardiness",
    "maximize_profit",
    "balance_workload",
)


def parse_time(time_str: str) -> time:
    """
    Parse time string in HH:MM format.

    Args:
        time_str: Time string (e.g., "08:00")

    Returns:
        time object
    """
    if isinstance(time_str, time):
        return time_str
    hour, minute = map(int, str(time_str).split(':'))
    return time(hour, minute)


def minutes_of_day(value: time) -> int:
    return value.hour * 60 + value.minute


@dataclass
class MaintenanceWindow:
    """A recurring maintenance slot (daily, weekly or monthly)."""
    start_time: time
    end_time: time
    frequency: str = "weekly"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start_time.strftime("%H:%M"),
            "end": self.end_time.strftime("%H:%M"),
            "frequency": self.frequency,
        }

    def __str__(self) -> str:
        return f"Maintenance({self.start_time}-{self.end_time}, {self.frequency})"


@dataclass
class OperationalConstraints:
    """
    Shop operating rules.

    Only the working-hours window, the minimum break and the continuous run
    limit are read by the engine (schedule audit and alert rules); the rest
    is carried through for the dashboard.
    """

    working_hours_start: time = time(8, 0)
    working_hours_end: time = time(17, 0)
    working_days: List[str] = field(
        default_factory=lambda: ["monday", "tuesday", "wednesday", "thursday", "friday"]
    )
    max_overtime_hours: float = 10.0      # per week
    minimum_break_time: float = 15.0      # minutes between jobs
    max_continuous_run_time: float = 8.0  # hours before a mandatory break
    maintenance_windows: List[MaintenanceWindow] = field(default_factory=list)

    @property
    def crosses_midnight(self) -> bool:
        """True for windows such as 22:00-06:00; equal ends mean round the clock."""
        return self.working_hours_end <= self.working_hours_start

    def get_working_window_minutes(self) -> int:
        """
        Length of the daily working window in minutes.

        A window that crosses midnight wraps into the next day.

        Returns:
            Window duration in minutes
        """
        length = minutes_of_day(self.working_hours_end) - minutes_of_day(self.working_hours_start)
        if self.crosses_midnight:
            length += 24 * 60
        return length

    def is_within_working_hours(self, time_point: time) -> bool:
        point = minutes_of_day(time_point)
        start = minutes_of_day(self.working_hours_start)
        end = minutes_of_day(self.working_hours_end)
        if self.crosses_midnight:
            return point >= start or point <= end
        return start <= point <= end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "working_hours": {
                "start": self.working_hours_start.strftime("%H:%M"),
                "end": self.working_hours_end.strftime("%H:%M"),
            },
            "working_days": list(self.working_days),
            "max_overtime_hours": self.max_overtime_hours,
            "minimum_break_time": self.minimum_break_time,
            "max_continuous_run_time": self.max_continuous_run_time,
            "maintenance_windows": [w.to_dict() for w in self.maintenance_windows],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OperationalConstraints':
        hours = pick(data, "working_hours", "workingHours", {}) or {}
        windows = [
            MaintenanceWindow(
                parse_time(w["start"]),
                parse_time(w["end"]),
                w.get("frequency", "weekly"),
            )
            for w in pick(data, "maintenance_windows", "maintenanceWindows", []) or []
        ]
        defaults = cls()
        return cls(
            working_hours_start=parse_time(hours.get("start", "08:00")),
            working_hours_end=parse_time(hours.get("end", "17:00")),
            working_days=list(pick(data, "working_days", "workingDays", defaults.working_days)),
            max_overtime_hours=float(
                pick(data, "max_overtime_hours", "maxOvertimeHours", defaults.max_overtime_hours)
            ),
            minimum_break_time=float(
                pick(data, "minimum_break_time", "minimumBreakTime", defaults.minimum_break_time)
            ),
            max_continuous_run_time=float(
                pick(data, "max_continuous_run_time", "maxContinuousRunTime",
                     defaults.max_continuous_run_time)
            ),
            maintenance_windows=windows,
        )

    def __str__(self) -> str:
        return (f"OperationalConstraints(Hours: {self.working_hours_start}-{self.working_hours_end}, "
                f"{len(self.maintenance_windows)} maintenance window(s))")


@dataclass
class OperatorShift:
    shift_id: str
    start_time: time
    end_time: time
    operator_count: int = 0


@dataclass
class MaterialAvailability:
    material_type: str
    available_quantity: float = 0.0
    lead_time: float = 0.0  # days


@dataclass
class ToolingAvailability:
    tool_type: str
    available: bool = True
    setup_time: float = 0.0  # minutes


@dataclass
class ResourceConstraints:
    """Operators, shifts and stock available for the schedule period."""

    available_operators: int = 1
    operator_shifts: List[OperatorShift] = field(default_factory=list)
    material_availability: List[MaterialAvailability] = field(default_factory=list)
    tooling_availability: List[ToolingAvailability] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "available_operators": self.available_operators,
            "operator_shifts": [
                {
                    "shift_id": s.shift_id,
                    "start_time": s.start_time.strftime("%H:%M"),
                    "end_time": s.end_time.strftime("%H:%M"),
                    "operator_count": s.operator_count,
                }
                for s in self.operator_shifts
            ],
            "material_availability": [
                {
                    "material_type": m.material_type,
                    "available_quantity": m.available_quantity,
                    "lead_time": m.lead_time,
                }
                for m in self.material_availability
            ],
            "tooling_availability": [
                {"tool_type": t.tool_type, "available": t.available, "setup_time": t.setup_time}
                for t in self.tooling_availability
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ResourceConstraints':
        shifts = [
            OperatorShift(
                shift_id=str(pick(s, "shift_id", "shiftId")),
                start_time=parse_time(pick(s, "start_time", "startTime", "08:00")),
                end_time=parse_time(pick(s, "end_time", "endTime", "16:00")),
                operator_count=int(pick(s, "operator_count", "operatorCount", 0)),
            )
            for s in pick(data, "operator_shifts", "operatorShifts", []) or []
        ]
        materials = [
            MaterialAvailability(
                material_type=pick(m, "material_type", "materialType"),
                available_quantity=float(pick(m, "available_quantity", "availableQuantity", 0)),
                lead_time=float(pick(m, "lead_time", "leadTime", 0)),
            )
            for m in pick(data, "material_availability", "materialAvailability", []) or []
        ]
        tooling = [
            ToolingAvailability(
                tool_type=pick(t, "tool_type", "toolType"),
                available=bool(t.get("available", True)),
                setup_time=float(pick(t, "setup_time", "setupTime", 0)),
            )
            for t in pick(data, "tooling_availability", "toolingAvailability", []) or []
        ]
        return cls(
            available_operators=int(pick(data, "available_operators", "availableOperators", 1)),
            operator_shifts=shifts,
            material_availability=materials,
            tooling_availability=tooling,
        )


@dataclass
class OptimizationGoals:
    """
    Objective and weights steering the priority score.

    Each weight must lie in [0, 1]; the weights are expected to sum to
    roughly 1.0 but that is not enforced.
    """

    primary_objective: str = "minimize_tardiness"
    secondary_objectives: List[str] = field(default_factory=list)
    customer_satisfaction_weight: float = 0.3
    profitability_weight: float = 0.2
    efficiency_weight: float = 0.2
    urgency_weight: float = 0.3

    def __post_init__(self):
        for name, value in self.weights().items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got: {value}")

    def weights(self) -> Dict[str, float]:
        return {
            "customer_satisfaction_weight": self.customer_satisfaction_weight,
            "profitability_weight": self.profitability_weight,
            "efficiency_weight": self.efficiency_weight,
            "urgency_weight": self.urgency_weight,
        }

    def with_weights(self, weights: Dict[str, float]) -> 'OptimizationGoals':
        """Return a copy of these goals with some weights replaced."""
        merged = {**self.weights(), **weights}
        return OptimizationGoals(
            primary_objective=self.primary_objective,
            secondary_objectives=list(self.secondary_objectives),
            **merged,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "primary_objective": self.primary_objective,
            "secondary_objectives": list(self.secondary_objectives),
            **self.weights(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptimizationGoals':
        defaults = cls()
        return cls(
            primary_objective=pick(data, "primary_objective", "primaryObjective",
                                   defaults.primary_objective),
            secondary_objectives=list(
                pick(data, "secondary_objectives", "secondaryObjectives", []) or []
            ),
            customer_satisfaction_weight=float(
                pick(data, "customer_satisfaction_weight", "customerSatisfactionWeight",
                     defaults.customer_satisfaction_weight)
            ),
            profitability_weight=float(
                pick(data, "profitability_weight", "profitabilityWeight",
                     defaults.profitability_weight)
            ),
            efficiency_weight=float(
                pick(data, "efficiency_weight", "efficiencyWeight", defaults.efficiency_weight)
            ),
            urgency_weight=float(
                pick(data, "urgency_weight", "urgencyWeight", defaults.urgency_weight)
            ),
        )


@dataclass
class QualityRequirements:
    """Inspection settings. Not used for sequencing, only for quality alerts."""

    allowable_rework: float = 2.0         # percent
    quality_check_time: float = 0.0       # minutes per job
    inspection_requirements: str = "sampling"
    quality_gate_threshold: float = 7.0   # 1-10 scale

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowable_rework": self.allowable_rework,
            "quality_check_time": self.quality_check_time,
            "inspection_requirements": self.inspection_requirements,
            "quality_gate_threshold": self.quality_gate_threshold,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'QualityRequirements':
        data = data or {}
        defaults = cls()
        return cls(
            allowable_rework=float(
                pick(data, "allowable_rework", "allowableRework", defaults.allowable_rework)
            ),
            quality_check_time=float(
                pick(data, "quality_check_time", "qualityCheckTime", defaults.quality_check_time)
            ),
            inspection_requirements=pick(
                data, "inspection_requirements", "inspectionRequirements",
                defaults.inspection_requirements,
            ),
            quality_gate_threshold=float(
                pick(data, "quality_gate_threshold", "qualityGateThreshold",
                     defaults.quality_gate_threshold)
            ),
        )
