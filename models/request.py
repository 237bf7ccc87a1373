"""
Optimization Request - The input bundle handed over by the job queue form

One request holds everything a single optimize() call needs. It is built
fresh for every run and never mutated by the engine.
"""

from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple
from dataclasses import dataclass, field, replace

from models.job import Job, pick, to_utc
from models.machine import Machine
from models.constraints import (
    OperationalConstraints,
    ResourceConstraints,
    OptimizationGoals,
    QualityRequirements,
)


@dataclass
class OptimizationRequest:
    """
    Complete input bundle for the job queue optimizer.

    Example:
        >>> request = OptimizationRequest(jobs=[job], machines=[machine])
        >>> request.job_count
        1
    """

    jobs: List[Job] = field(default_factory=list)
    machines: List[Machine] = field(default_factory=list)
    operational_constraints: OperationalConstraints = field(default_factory=OperationalConstraints)
    goals: OptimizationGoals = field(default_factory=OptimizationGoals)
    resources: ResourceConstraints = field(default_factory=ResourceConstraints)
    quality: QualityRequirements = field(default_factory=QualityRequirements)

    @property
    def job_count(self) -> int:
        return len(self.jobs)

    @property
    def urgent_job_count(self) -> int:
        """Jobs in the urgent or critical tier."""
        return sum(1 for job in self.jobs if job.is_urgent)

    @property
    def available_machines(self) -> List[Machine]:
        return [m for m in self.machines if m.is_available]

    def align_timezones(
        self,
        now: Optional[datetime] = None
    ) -> Tuple['OptimizationRequest', Optional[datetime]]:
        """
        Put due dates and ``now`` on one clock convention.

        When naive and timezone-aware values are mixed, every value is moved to
        UTC (naive ones are read as UTC). Uniform inputs come back unchanged.

        Returns:
            Tuple of (request, now); the request is a copy when anything changed
        """
        values = [job.due_date for job in self.jobs]
        if now is not None:
            values.append(now)
        if len({value.tzinfo is None for value in values}) < 2:
            return self, now

        jobs = [replace(job, due_date=to_utc(job.due_date)) for job in self.jobs]
        return replace(self, jobs=jobs), to_utc(now) if now is not None else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobQueue": [job.to_dict() for job in self.jobs],
            "machineCapabilities": [machine.to_dict() for machine in self.machines],
            "operationalConstraints": self.operational_constraints.to_dict(),
            "optimizationGoals": self.goals.to_dict(),
            "resourceConstraints": self.resources.to_dict(),
            "qualityRequirements": self.quality.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'OptimizationRequest':
        """
        Build a request from the form bundle.

        Top-level keys follow the form (``jobQueue``, ``machineCapabilities``
        ...) or their snake_case equivalents.
        """
        return cls(
            jobs=[Job.from_dict(j) for j in pick(data, "job_queue", "jobQueue", []) or []],
            machines=[
                Machine.from_dict(m)
                for m in pick(data, "machine_capabilities", "machineCapabilities", []) or []
            ],
            operational_constraints=OperationalConstraints.from_dict(
                pick(data, "operational_constraints", "operationalConstraints", {}) or {}
            ),
            goals=OptimizationGoals.from_dict(
                pick(data, "optimization_goals", "optimizationGoals", {}) or {}
            ),
            resources=ResourceConstraints.from_dict(
                pick(data, "resource_constraints", "resourceConstraints", {}) or {}
            ),
            quality=QualityRequirements.from_dict(
                pick(data, "quality_requirements", "qualityRequirements", {})
            ),
        )

    def __str__(self) -> str:
        return (f"OptimizationRequest({self.job_count} jobs, {len(self.machines)} machines, "
                f"{self.resources.available_operators} operators)")
