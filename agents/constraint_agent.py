"""
Constraint & Policy Agent

This agent audits a built schedule against the shop's operational rules
before it is handed to the dashboard.

Key Responsibilities:
    - Report jobs left unassigned
    - Check machine compatibility of every assignment
    - Detect time overlaps on the same machine
    - Flag urgent and critical jobs finishing after their due date
    - Enforce the maximum continuous run time per machine
    - Flag jobs running outside the working-hours window

Does NOT use LLM - uses deterministic rule checking for reliability.
"""

from datetime import timedelta
from typing import List, Tuple

from models.request import OptimizationRequest
from models.schedule import Schedule, ScheduledJob
from models.constraints import OperationalConstraints


class ConstraintAgent:
    """
    Agent responsible for validating schedules against all constraints.

    Violations never stop the run; they are reported alongside the schedule.
    """

    def validate_schedule(
        self,
        schedule: Schedule,
        request: OptimizationRequest
    ) -> Tuple[bool, List[str], str]:
        """
        Comprehensive validation of a schedule against all constraints.

        Args:
            schedule: Schedule to validate
            request: Input bundle the schedule was built from

        Returns:
            Tuple of (is_valid, violations, report)
        """
        violations = []

        # 1. Check that all jobs are assigned
        for item in schedule.unassignable:
            violations.append(f"Job {item.job.job_id} not scheduled: {item.reason}")

        # 2. Validate each assignment
        machines = {m.machine_id: m for m in request.machines}
        for sj in schedule:
            machine = machines.get(sj.assigned_machine)
            if machine is None or not sj.compatible or not machine.can_cut(sj.job):
                violations.append(
                    f"Machine {sj.assigned_machine} cannot cut {sj.job.material_type} "
                    f"{sj.job.thickness}mm (Job {sj.job_id})"
                )

            if sj.job.is_urgent and sj.is_late():
                violations.append(
                    f"CRITICAL: {sj.job.priority.capitalize()} job {sj.job_id} is "
                    f"{sj.get_tardiness_minutes():.0f} min late "
                    f"(due {sj.job.due_date:%Y-%m-%d %H:%M}, ends {sj.scheduled_end:%Y-%m-%d %H:%M})"
                )

        # 3. Per-machine timeline checks
        constraints = request.operational_constraints
        for machine_id in sorted({sj.assigned_machine for sj in schedule}):
            timeline = schedule.get_machine_jobs(machine_id)
            violations.extend(self._check_overlaps(machine_id, timeline))
            violations.extend(self._check_continuous_run(machine_id, timeline, constraints))

        # 4. Working-hours window
        violations.extend(self.check_working_hours(schedule, constraints))

        is_valid = len(violations) == 0
        return is_valid, violations, self._report(schedule, violations)

    def _check_overlaps(self, machine_id: str, timeline: List[ScheduledJob]) -> List[str]:
        violations = []
        for previous, current in zip(timeline, timeline[1:]):
            if current.scheduled_start < previous.scheduled_end:
                violations.append(
                    f"Time overlap on {machine_id}: Jobs {previous.job_id} "
                    f"and {current.job_id} conflict"
                )
        return violations

    def _check_continuous_run(
        self,
        machine_id: str,
        timeline: List[ScheduledJob],
        constraints: OperationalConstraints
    ) -> List[str]:
        """
        Consecutive jobs separated by less than the minimum break form one
        continuous run; a run may not exceed ``max_continuous_run_time``.
        """
        if not timeline or constraints.max_continuous_run_time <= 0:
            return []

        limit = timedelta(hours=constraints.max_continuous_run_time)
        min_break = timedelta(minutes=constraints.minimum_break_time)
        violations = []

        run_start = timeline[0].scheduled_start
        run_end = timeline[0].scheduled_end
        runs = []
        for sj in timeline[1:]:
            if sj.scheduled_start - run_end < min_break:
                run_end = max(run_end, sj.scheduled_end)
            else:
                runs.append((run_start, run_end))
                run_start, run_end = sj.scheduled_start, sj.scheduled_end
        runs.append((run_start, run_end))

        for start, end in runs:
            if end - start > limit:
                hours = (end - start).total_seconds() / 3600
                violations.append(
                    f"{machine_id} runs {hours:.1f}h without a break from "
                    f"{start:%Y-%m-%d %H:%M} (limit {constraints.max_continuous_run_time:g}h)"
                )
        return violations

    def check_working_hours(
        self,
        schedule: Schedule,
        constraints: OperationalConstraints
    ) -> List[str]:
        """
        Jobs that do not fit inside one occurrence of the working-hours window.

        A job may cross midnight only when the window itself does.
        """
        window = timedelta(minutes=constraints.get_working_window_minutes())
        violations = []
        for sj in schedule:
            start, end = sj.scheduled_start, sj.scheduled_end
            changes_day = start.date() != end.date() and not constraints.crosses_midnight
            if (changes_day
                    or end - start > window
                    or not constraints.is_within_working_hours(start.time())
                    or not constraints.is_within_working_hours(end.time())):
                violations.append(
                    f"Job {sj.job_id} on {sj.assigned_machine} runs "
                    f"{start:%H:%M}-{end:%H:%M} outside working hours "
                    f"{constraints.working_hours_start:%H:%M}-{constraints.working_hours_end:%H:%M}"
                )
        return violations

    def _report(self, schedule: Schedule, violations: List[str]) -> str:
        if not violations:
            return f"""CONSTRAINT VALIDATION: PASSED

All {len(schedule)} job assignments validated successfully.

Checks Performed:
- All jobs assigned to machines
- Material and thickness compatibility verified
- No time overlaps on same machine
- Urgent and critical deadlines met
- Continuous run time within limit
- Working hours respected"""

        report = f"""CONSTRAINT VALIDATION: FAILED

Found {len(violations)} violation(s):

"""
        for i, violation in enumerate(violations, 1):
            report += f"{i}. {violation}\n"
        return report

    def __str__(self) -> str:
        return "ConstraintAgent(rule-based validation)"
