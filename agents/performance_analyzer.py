"""
Performance Analyzer

Derives schedule KPIs from the built schedule:
    - total makespan: summed setup + cutting time (hours)
    - elapsed makespan: first start to last completion (hours)
    - average wait time: total makespan * 0.2 / job count (heuristic)
    - on-time delivery rate and total tardiness from actual due dates
    - machine utilization: busy minutes over the schedule horizon
    - throughput (jobs/day) and average flow time (hours)
"""

from datetime import datetime
from typing import List

from models.machine import Machine
from models.schedule import Schedule
from models.analysis import PerformanceMetrics, MachineUtilization

WAIT_TIME_FACTOR = 0.2


class PerformanceAnalyzer:
    """Pure KPI computation over one schedule."""

    def analyze(
        self,
        schedule: Schedule,
        machines: List[Machine],
        now: datetime
    ) -> PerformanceMetrics:
        """
        Calculate performance metrics for a schedule.

        Args:
            schedule: Built schedule
            machines: Full machine pool (non-available machines report 0%)
            now: Reference time the schedule started from

        Returns:
            PerformanceMetrics
        """
        job_count = len(schedule)
        utilization = self.machine_utilization(schedule, machines, now)

        if job_count == 0:
            return PerformanceMetrics(machine_utilization=utilization)

        total_makespan = schedule.total_work_minutes() / 60
        late = [sj for sj in schedule if sj.is_late()]
        on_time_rate = (job_count - len(late)) / job_count * 100
        total_tardiness = sum(sj.get_tardiness_minutes() for sj in late) / 60

        throughput = job_count / (total_makespan / 24) if total_makespan > 0 else 0.0

        return PerformanceMetrics(
            total_makespan=total_makespan,
            average_wait_time=total_makespan * WAIT_TIME_FACTOR / job_count,
            machine_utilization=utilization,
            on_time_delivery_rate=on_time_rate,
            total_tardiness=total_tardiness,
            throughput_rate=throughput,
            average_flow_time=total_makespan / job_count,
            elapsed_makespan=schedule.elapsed_hours(),
            late_jobs=len(late),
            job_count=job_count,
        )

    def machine_utilization(
        self,
        schedule: Schedule,
        machines: List[Machine],
        now: datetime
    ) -> List[MachineUtilization]:
        """
        Busy share of the schedule horizon for every machine.

        The horizon runs from ``now`` to the last completion. Machines that
        are not available, or when nothing was scheduled, report 0.
        """
        busy = schedule.machine_busy_minutes()
        last_end = schedule.last_end()
        horizon = (last_end - now).total_seconds() / 60 if last_end else 0.0

        utilization = []
        for machine in machines:
            value = 0.0
            if machine.is_available and horizon > 0:
                value = min(100.0, busy.get(machine.machine_id, 0.0) / horizon * 100)
            utilization.append(MachineUtilization(machine.machine_id, round(value, 1)))
        return utilization

    def __str__(self) -> str:
        return "PerformanceAnalyzer(makespan, utilization, on-time, tardiness)"
