"""
Resource Analyzer

Looks at the resources behind a schedule: operators, machines, material
stock, tooling and shift coverage.

Key Responsibilities:
    - Operator utilization (busy machine-hours over operator-hours)
    - Per-machine efficiency and bottleneck detection
    - Material demand (part count) against stock, with shortage flags
    - Tooling availability and shift coverage
"""

from datetime import datetime
from typing import Dict, Optional

from models.request import OptimizationRequest
from models.policy import SchedulingPolicy
from models.schedule import Schedule
from models.analysis import (
    PerformanceMetrics,
    ResourceUtilization,
    MachineEfficiency,
    MaterialUsage,
    ToolingStatus,
    ShiftCoverage,
    BottleneckEntry,
)

SHIFT_COVERAGE_PER_OPERATOR = 40.0
MIN_SHIFT_OPERATORS = 2


class ResourceAnalyzer:

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.policy = policy or SchedulingPolicy()

    def analyze(
        self,
        request: OptimizationRequest,
        schedule: Schedule,
        performance: PerformanceMetrics,
        now: datetime
    ) -> ResourceUtilization:
        """
        Resource utilization for a built schedule.

        Args:
            request: Input bundle
            schedule: Built schedule
            performance: Metrics already computed for the schedule
            now: Reference time

        Returns:
            ResourceUtilization
        """
        machine_efficiency = self._machine_efficiency(request, schedule, performance)
        busy_hours = schedule.total_work_minutes() / 60

        return ResourceUtilization(
            operator_utilization=self._operator_utilization(request, schedule, busy_hours, now),
            machine_efficiency=machine_efficiency,
            material_usage=self._material_usage(request),
            tooling_utilization=[
                ToolingStatus(t.tool_type, t.available, t.setup_time)
                for t in request.resources.tooling_availability
            ],
            shift_coverage=[
                ShiftCoverage(
                    shift_id=s.shift_id,
                    coverage=min(100.0, s.operator_count * SHIFT_COVERAGE_PER_OPERATOR),
                    overtime=s.operator_count < MIN_SHIFT_OPERATORS,
                )
                for s in request.resources.operator_shifts
            ],
            equipment_efficiency=self._equipment_efficiency(request, schedule),
            bottleneck_analysis=self._bottleneck_analysis(machine_efficiency, schedule),
        )

    def _operator_utilization(
        self,
        request: OptimizationRequest,
        schedule: Schedule,
        busy_hours: float,
        now: datetime
    ) -> float:
        operators = request.resources.available_operators
        last_end = schedule.last_end()
        if operators <= 0 or last_end is None:
            return 0.0
        horizon_hours = (last_end - now).total_seconds() / 3600
        if horizon_hours <= 0:
            return 0.0
        return round(min(100.0, busy_hours / (operators * horizon_hours) * 100), 1)

    def _machine_efficiency(
        self,
        request: OptimizationRequest,
        schedule: Schedule,
        performance: PerformanceMetrics
    ):
        rows = [
            MachineEfficiency(
                machine_id=m.machine_id,
                efficiency=m.efficiency,
                utilization=performance.utilization_for(m.machine_id),
            )
            for m in request.machines
        ]
        if not rows:
            return rows

        busiest = max(rows, key=lambda r: r.utilization)
        if busiest.utilization >= self.policy.bottleneck_utilization:
            busiest.bottleneck = True
        return rows

    def _material_usage(self, request: OptimizationRequest):
        demand: Dict[str, float] = {}
        for job in request.jobs:
            demand[job.material_type] = demand.get(job.material_type, 0.0) + job.part_count

        usage = []
        for stock in request.resources.material_availability:
            needed = demand.get(stock.material_type, 0.0)
            if stock.available_quantity > 0:
                utilization = min(100.0, needed / stock.available_quantity * 100)
            else:
                utilization = 100.0 if needed > 0 else 0.0
            usage.append(MaterialUsage(
                material_type=stock.material_type,
                demand=needed,
                available=stock.available_quantity,
                utilization=round(utilization, 1),
                shortage=needed > stock.available_quantity,
            ))
        return usage

    def _equipment_efficiency(self, request: OptimizationRequest, schedule: Schedule) -> float:
        """Machine efficiency weighted by the busy time each machine received."""
        busy = schedule.machine_busy_minutes()
        total = sum(busy.values())
        if total <= 0:
            return 0.0
        by_id = {m.machine_id: m for m in request.machines}
        weighted = sum(by_id[mid].efficiency * minutes for mid, minutes in busy.items() if mid in by_id)
        return round(weighted / total, 1)

    def _bottleneck_analysis(self, machine_efficiency, schedule: Schedule):
        entries = []
        for row in machine_efficiency:
            if row.bottleneck:
                entries.append(BottleneckEntry(
                    resource=f"Machine {row.machine_id}",
                    utilization_rate=row.utilization,
                    impact="Limits throughput; jobs queue behind this machine",
                ))

        total = schedule.total_work_minutes()
        setup = sum(sj.setup_time for sj in schedule)
        if total > 0:
            setup_share = setup / total * 100
            if setup_share >= self.policy.setup_share_threshold:
                entries.append(BottleneckEntry(
                    resource="Setup time",
                    utilization_rate=round(setup_share, 1),
                    impact="Significant impact on efficiency",
                ))
        return entries
