"""
Machine Matcher

Finds the machine a job can run on. A machine is eligible when it is
available, lists the job's material and covers the job's thickness.
"""

from datetime import datetime
from typing import List, Dict, Optional

from models.job import Job
from models.machine import Machine


class NoMachinesAvailableError(ValueError):
    """Raised when the machine list handed to the matcher is empty."""


class MachineMatcher:
    """Deterministic constraint-based job to machine matching."""

    @staticmethod
    def _require_machines(machines: List[Machine]):
        if not machines:
            raise NoMachinesAvailableError("No machines available")

    def is_eligible(self, job: Job, machine: Machine) -> bool:
        return machine.is_available and machine.can_cut(job)

    def eligible(self, job: Job, machines: List[Machine]) -> List[Machine]:
        """All eligible machines, in list order."""
        self._require_machines(machines)
        return [m for m in machines if self.is_eligible(job, m)]

    def match(self, job: Job, machines: List[Machine]) -> Optional[Machine]:
        """
        First eligible machine in list order.

        Args:
            job: Job to place
            machines: Machine pool

        Returns:
            The machine, or None when no machine is eligible

        Raises:
            NoMachinesAvailableError: if ``machines`` is empty
        """
        candidates = self.eligible(job, machines)
        return candidates[0] if candidates else None

    def match_earliest(
        self,
        job: Job,
        machines: List[Machine],
        availability: Dict[str, datetime]
    ) -> Optional[Machine]:
        """
        Eligible machine that frees up first.

        Ties go to the machine listed first.

        Args:
            job: Job to place
            machines: Machine pool
            availability: machine_id -> next free time

        Returns:
            The machine, or None when no machine is eligible
        """
        best = None
        best_time = None

        for machine in self.eligible(job, machines):
            free_at = availability[machine.machine_id]
            if best is None or free_at < best_time:
                best = machine
                best_time = free_at

        return best

    def describe_mismatch(self, job: Job, machines: List[Machine]) -> str:
        """Human-readable reason why no machine is eligible for ``job``."""
        if not any(m.is_available for m in machines):
            return "No machine is currently available"
        if not any(job.material_type in m.material_compatibility for m in machines if m.is_available):
            return f"No available machine cuts {job.material_type}"
        return f"No available machine cuts {job.material_type} at {job.thickness}mm"

    def __str__(self) -> str:
        return "MachineMatcher(status + material + thickness)"
