"""
Baseline Scheduler - Single Shared Line Implementation

This provides a baseline for comparison against the optimized schedule.
All jobs run one after another on one shared clock, as if the shop had a
single cutting line, and jobs without a compatible machine are forced onto
the first machine.

Purpose: Show the improvement achieved by per-machine sequencing.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from models.job import Job
from models.machine import Machine
from models.constraints import OptimizationGoals
from models.policy import SchedulingPolicy
from models.schedule import Schedule, ScheduledJob

from agents.priority_scorer import PriorityScorer
from agents.machine_matcher import MachineMatcher, NoMachinesAvailableError


class BaselineScheduler:
    """
    Single-cursor baseline scheduler.

    This scheduler uses minimal intelligence:
    - Same priority ranking as the optimizer
    - Chooses the first compatible machine, else the first machine
    - One shared time cursor, so no two jobs ever overlap
    - No dependency handling

    Used as a baseline to demonstrate the improvement
    achieved by the optimizer.
    """

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.name = "Baseline Single-Line Scheduler"
        self.policy = policy or SchedulingPolicy()
        self.scorer = PriorityScorer(self.policy)
        self.matcher = MachineMatcher()

    def schedule(
        self,
        jobs: List[Job],
        machines: List[Machine],
        goals: OptimizationGoals,
        now: datetime
    ) -> Schedule:
        """
        Create a single-line schedule without parallelism.

        Algorithm:
        1. Rank jobs by priority score
        2. For each job, take the first compatible machine (first machine if none)
        3. start = shared cursor, end = start + effective setup + duration
        4. cursor = end + buffer

        Args:
            jobs: List of jobs to schedule
            machines: List of machines
            goals: Optimization goal weights
            now: Reference time the cursor starts at

        Returns:
            Schedule object
        """
        if not machines:
            raise NoMachinesAvailableError("No machines available")

        schedule = Schedule(created_by=self.name)
        cursor = now

        for sequence, (job, _) in enumerate(self.scorer.rank(jobs, goals, now), 1):
            machine = self.matcher.match(job, machines)
            compatible = machine is not None
            if machine is None:
                machine = machines[0]

            setup = machine.effective_setup_time(job)
            buffer_time = self.policy.buffer_minutes(job.estimated_duration)
            end = cursor + timedelta(minutes=setup + job.estimated_duration)

            schedule.add(ScheduledJob(
                job=job,
                assigned_machine=machine.machine_id,
                scheduled_start=cursor,
                scheduled_end=end,
                sequence_number=sequence,
                buffer_time=buffer_time,
                setup_time=setup,
                compatible=compatible,
            ))
            cursor = end + timedelta(minutes=buffer_time)

        return schedule

    def __str__(self) -> str:
        return "BaselineScheduler(algorithm=single-line, optimization=None)"
