"""
Schedule Model - Represents the sequenced job queue

This module defines the ScheduledJob record produced for every placed job,
the UnassignableJob record for jobs no machine can take, and the Schedule
container holding both.

Key Features:
    - Global sequence order plus machine-wise views
    - Timing, tardiness and late checks per job
    - Busy-time totals per machine
"""

from datetime import datetime, timedelta
from typing import List, Dict, Optional, Any
from dataclasses import dataclass, field

from models.job import Job


@dataclass(frozen=True)
class ScheduledJob:
    """
    A job placed on a machine with timing.

    ``setup_time`` is the effective setup (nominal setup times the machine's
    multiplier); ``scheduled_end - scheduled_start`` always equals
    ``setup_time + job.estimated_duration`` minutes.
    """
    job: Job
    assigned_machine: str
    scheduled_start: datetime
    scheduled_end: datetime
    sequence_number: int
    buffer_time: float          # idle minutes held after this job on its machine
    setup_time: float = 0.0
    compatible: bool = True     # False only for jobs placed by the fallback policy

    @property
    def job_id(self) -> str:
        return self.job.job_id

    def get_duration_minutes(self) -> float:
        """Total machine time including setup."""
        return self.job.estimated_duration + self.setup_time

    def is_late(self) -> bool:
        """Check if job finishes after its due date."""
        return self.scheduled_end > self.job.due_date

    def get_tardiness_minutes(self) -> float:
        """Calculate how many minutes late this job is."""
        if not self.is_late():
            return 0.0
        return (self.scheduled_end - self.job.due_date).total_seconds() / 60

    def released_at(self) -> datetime:
        """When the machine is free again, buffer included."""
        return self.scheduled_end + timedelta(minutes=self.buffer_time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "jobId": self.job.job_id,
            "jobName": self.job.job_name,
            "assignedMachine": self.assigned_machine,
            "scheduledStart": self.scheduled_start.isoformat(),
            "scheduledEnd": self.scheduled_end.isoformat(),
            "estimatedDuration": self.job.estimated_duration,
            "setupTime": round(self.setup_time, 2),
            "priority": self.job.priority,
            "sequenceNumber": self.sequence_number,
            "bufferTime": round(self.buffer_time, 2),
            "compatible": self.compatible,
            "isLate": self.is_late(),
        }


@dataclass(frozen=True)
class UnassignableJob:
    """A job that no available machine can cut."""
    job: Job
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job.job_id,
            "jobName": self.job.job_name,
            "priority": self.job.priority,
            "reason": self.reason,
        }


@dataclass
class Schedule:
    """
    Represents a complete sequenced schedule.

    ``scheduled_jobs`` is kept in sequence-number order.
    """

    scheduled_jobs: List[ScheduledJob] = field(default_factory=list)
    unassignable: List[UnassignableJob] = field(default_factory=list)

    # Metadata
    created_by: str = "Job Queue Optimizer"

    def add(self, scheduled_job: ScheduledJob):
        self.scheduled_jobs.append(scheduled_job)

    def mark_unassignable(self, job: Job, reason: str):
        self.unassignable.append(UnassignableJob(job, reason))

    def __len__(self) -> int:
        return len(self.scheduled_jobs)

    def __iter__(self):
        return iter(self.scheduled_jobs)

    @property
    def is_empty(self) -> bool:
        return not self.scheduled_jobs

    def get_machine_jobs(self, machine_id: str) -> List[ScheduledJob]:
        """
        Get all jobs assigned to a specific machine, in start order.

        Args:
            machine_id: Machine identifier

        Returns:
            List of scheduled jobs for that machine
        """
        machine_jobs = [sj for sj in self.scheduled_jobs if sj.assigned_machine == machine_id]
        return sorted(machine_jobs, key=lambda sj: sj.scheduled_start)

    def machine_busy_minutes(self) -> Dict[str, float]:
        """Setup plus cutting minutes per machine id."""
        busy: Dict[str, float] = {}
        for sj in self.scheduled_jobs:
            busy[sj.assigned_machine] = busy.get(sj.assigned_machine, 0.0) + sj.get_duration_minutes()
        return busy

    def find(self, job_id: str) -> Optional[ScheduledJob]:
        return next((sj for sj in self.scheduled_jobs if sj.job.job_id == job_id), None)

    def first_start(self) -> Optional[datetime]:
        if self.is_empty:
            return None
        return min(sj.scheduled_start for sj in self.scheduled_jobs)

    def last_end(self) -> Optional[datetime]:
        if self.is_empty:
            return None
        return max(sj.scheduled_end for sj in self.scheduled_jobs)

    def total_work_minutes(self) -> float:
        return sum(sj.get_duration_minutes() for sj in self.scheduled_jobs)

    def elapsed_hours(self) -> float:
        """Hours from the first start to the last completion."""
        if self.is_empty:
            return 0.0
        return (self.last_end() - self.first_start()).total_seconds() / 3600

    def to_dict(self) -> Dict[str, Any]:
        """Convert schedule to dictionary."""
        return {
            "optimizedSchedule": [sj.to_dict() for sj in self.scheduled_jobs],
            "unassignableJobs": [u.to_dict() for u in self.unassignable],
            "createdBy": self.created_by,
        }

    def __str__(self) -> str:
        machines = {sj.assigned_machine for sj in self.scheduled_jobs}
        return (f"Schedule({len(machines)} machines, {len(self.scheduled_jobs)} jobs, "
                f"{len(self.unassignable)} unassignable)")
