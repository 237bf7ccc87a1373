"""
Schedule Builder

Greedy list scheduler that turns the job queue into a sequenced schedule.

Algorithm:
    1. Rank jobs by priority score (stable, ties keep queue order)
    2. Keep a next-free time per machine, all starting at ``now``
    3. For each ranked job, pick the eligible machine that frees up first
    4. start = machine free time (and, when dependencies are enforced, not
       before every prerequisite has finished)
       end   = start + effective setup + estimated duration
    5. The machine is free again after end + buffer, where
       buffer = max(5, estimated duration * 0.1) minutes

Jobs that no available machine can cut are reported as unassignable
(``flag`` policy) or placed on the first machine and marked incompatible
(``fallback`` policy).
"""

import logging
from datetime import datetime, timedelta
from typing import List, Dict, Optional, Tuple

from models.job import Job
from models.machine import Machine
from models.constraints import OptimizationGoals
from models.policy import SchedulingPolicy
from models.schedule import Schedule, ScheduledJob

from agents.priority_scorer import PriorityScorer
from agents.machine_matcher import MachineMatcher, NoMachinesAvailableError

logger = logging.getLogger(__name__)


class ScheduleBuilder:
    """
    Builds a schedule on per-machine timelines.

    Each machine advances its own cursor, so jobs on different machines run
    in parallel.
    """

    def __init__(
        self,
        policy: Optional[SchedulingPolicy] = None,
        scorer: Optional[PriorityScorer] = None,
        matcher: Optional[MachineMatcher] = None
    ):
        self.policy = policy or SchedulingPolicy()
        self.scorer = scorer or PriorityScorer(self.policy)
        self.matcher = matcher or MachineMatcher()

    def build(
        self,
        jobs: List[Job],
        machines: List[Machine],
        goals: OptimizationGoals,
        now: datetime
    ) -> Schedule:
        """
        Sequence the queue.

        Args:
            jobs: Job queue (not mutated)
            machines: Machine pool
            goals: Optimization goal weights
            now: Reference time; every machine is free from here on

        Returns:
            Schedule with scheduled jobs in sequence order

        Raises:
            NoMachinesAvailableError: if ``machines`` is empty
            ValueError: if enforced dependencies form a cycle
        """
        if not machines:
            raise NoMachinesAvailableError("No machines available")

        ranked = self.scorer.rank(jobs, goals, now)
        availability: Dict[str, datetime] = {m.machine_id: now for m in machines}
        finished_at: Dict[str, datetime] = {}
        blocked: Dict[str, str] = {}  # job_id -> reason it could not be placed
        queue_ids = {job.job_id for job in jobs}

        schedule = Schedule()
        pending = [job for job, _ in ranked]

        while pending:
            job = pending.pop(self._next_ready(pending, queue_ids, finished_at, blocked))

            blocked_by = [d for d in self._queued_dependencies(job, queue_ids) if d in blocked]
            if blocked_by:
                reason = f"Depends on unscheduled job(s): {', '.join(blocked_by)}"
                self._reject(schedule, blocked, job, reason)
                continue

            machine, compatible = self._choose_machine(job, machines, availability)
            if machine is None:
                self._reject(schedule, blocked, job, self.matcher.describe_mismatch(job, machines))
                continue

            effective_setup = machine.effective_setup_time(job)
            buffer_time = self.policy.buffer_minutes(job.estimated_duration)

            start = availability[machine.machine_id]
            if self.policy.enforce_dependencies:
                for dep in self._queued_dependencies(job, queue_ids):
                    start = max(start, finished_at[dep])
            end = start + timedelta(minutes=effective_setup + job.estimated_duration)

            scheduled_job = ScheduledJob(
                job=job,
                assigned_machine=machine.machine_id,
                scheduled_start=start,
                scheduled_end=end,
                sequence_number=len(schedule) + 1,
                buffer_time=buffer_time,
                setup_time=effective_setup,
                compatible=compatible,
            )
            schedule.add(scheduled_job)

            availability[machine.machine_id] = scheduled_job.released_at()
            finished_at[job.job_id] = end

            logger.debug(
                "Scheduled %s on %s #%d %s -> %s",
                job.job_id, machine.machine_id, scheduled_job.sequence_number,
                start.isoformat(), end.isoformat(),
            )

        logger.info(
            "Built schedule: %d scheduled, %d unassignable",
            len(schedule), len(schedule.unassignable),
        )
        return schedule

    def _choose_machine(
        self,
        job: Job,
        machines: List[Machine],
        availability: Dict[str, datetime]
    ) -> Tuple[Optional[Machine], bool]:
        machine = self.matcher.match_earliest(job, machines, availability)
        if machine is not None:
            return machine, True

        if self.policy.unassignable_policy == "fallback":
            logger.warning(
                "No eligible machine for %s; falling back to %s",
                job.job_id, machines[0].machine_id,
            )
            return machines[0], False

        return None, False

    def _reject(self, schedule: Schedule, blocked: Dict[str, str], job: Job, reason: str):
        logger.warning("Job %s is unassignable: %s", job.job_id, reason)
        schedule.mark_unassignable(job, reason)
        blocked[job.job_id] = reason

    def _queued_dependencies(self, job: Job, queue_ids: set) -> List[str]:
        if not self.policy.enforce_dependencies:
            return []
        return [d for d in job.dependencies if d in queue_ids and d != job.job_id]

    def _next_ready(
        self,
        pending: List[Job],
        queue_ids: set,
        finished_at: Dict[str, datetime],
        blocked: Dict[str, str]
    ) -> int:
        """Index of the highest-ranked pending job whose in-queue dependencies are resolved."""
        if not self.policy.enforce_dependencies:
            return 0

        for index, job in enumerate(pending):
            deps = self._queued_dependencies(job, queue_ids)
            if all(d in finished_at or d in blocked for d in deps):
                return index

        cycle = ", ".join(job.job_id for job in pending)
        raise ValueError(f"Circular job dependencies among: {cycle}")

    def __str__(self) -> str:
        return (f"ScheduleBuilder(per-machine timelines, "
                f"unassignable={self.policy.unassignable_policy})")
