"""
Machine Model - Represents laser-cutting machines in the shop

This module defines the Machine class and its thickness range for
representing cutting equipment and what each machine can process.

Key Features:
    - Material compatibility and thickness range
    - Current status (available / busy / maintenance / offline)
    - Efficiency and setup-time multiplier
    - Operator skill requirement
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field

from models.job import Job, pick


MACHINE_STATUSES = ("available", "busy", "maintenance", "offline")
SKILL_LEVELS = ("basic", "intermediate", "advanced", "expert")


@dataclass
class ThicknessRange:
    """Inclusive range of material thickness (mm) a machine can cut."""
    min: float = 0.0
    max: float = 0.0

    def contains(self, thickness: float) -> bool:
        return self.min <= thickness <= self.max

    def __str__(self) -> str:
        return f"{self.min}-{self.max}mm"


@dataclass
class Machine:
    """
    Represents a laser-cutting machine with its capabilities.

    Example:
        >>> machine = Machine(
        ...     machine_id="LASER001",
        ...     machine_name="Fiber 6kW",
        ...     max_power=6000,
        ...     material_compatibility=["steel", "stainless"],
        ...     thickness_range=ThicknessRange(0.5, 20),
        ... )
    """

    machine_id: str                      # Unique identifier (e.g., "LASER001")
    machine_name: str = ""
    max_power: float = 0.0               # W
    material_compatibility: List[str] = field(default_factory=list)
    thickness_range: ThicknessRange = field(default_factory=ThicknessRange)
    current_status: str = "available"
    efficiency: float = 100.0            # percent
    setup_time_multiplier: float = 1.0   # Scales a job's nominal setup time
    operator_skill_level: str = "intermediate"

    @property
    def is_available(self) -> bool:
        """Check if the machine can take new work."""
        return self.current_status == "available"

    def can_cut(self, job: Job) -> bool:
        """
        Check if this machine can process the job's material and thickness.

        Args:
            job: Job to check

        Returns:
            True if material and thickness are both supported
        """
        return (
            job.material_type in self.material_compatibility
            and self.thickness_range.contains(job.thickness)
        )

    def effective_setup_time(self, job: Job) -> float:
        """Setup minutes for ``job`` on this machine."""
        return job.setup_time * self.setup_time_multiplier

    def to_dict(self) -> Dict[str, Any]:
        """Convert machine to dictionary."""
        return {
            "machine_id": self.machine_id,
            "machine_name": self.machine_name,
            "max_power": self.max_power,
            "material_compatibility": list(self.material_compatibility),
            "thickness_range": {"min": self.thickness_range.min, "max": self.thickness_range.max},
            "current_status": self.current_status,
            "efficiency": self.efficiency,
            "setup_time_multiplier": self.setup_time_multiplier,
            "operator_skill_level": self.operator_skill_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Machine':
        """Create a Machine from snake_case or camelCase keys."""
        thickness = pick(data, "thickness_range", "thicknessRange", {}) or {}
        return cls(
            machine_id=str(pick(data, "machine_id", "machineId")),
            machine_name=pick(data, "machine_name", "machineName", ""),
            max_power=float(pick(data, "max_power", "maxPower", 0)),
            material_compatibility=list(
                pick(data, "material_compatibility", "materialCompatibility", []) or []
            ),
            thickness_range=ThicknessRange(
                float(thickness.get("min", 0)), float(thickness.get("max", 0))
            ),
            current_status=pick(data, "current_status", "currentStatus", "available"),
            efficiency=float(pick(data, "efficiency", "efficiency", 100)),
            setup_time_multiplier=float(
                pick(data, "setup_time_multiplier", "setupTimeMultiplier", 1.0)
            ),
            operator_skill_level=pick(
                data, "operator_skill_level", "operatorSkillLevel", "intermediate"
            ),
        )

    def __str__(self) -> str:
        return (f"Machine({self.machine_id}: {', '.join(self.material_compatibility)}, "
                f"{self.thickness_range}, {self.current_status})")


# Example usage
if __name__ == "__main__":
    from datetime import datetime

    machine = Machine(
        machine_id="LASER001",
        machine_name="Fiber 6kW",
        max_power=6000,
        material_compatibility=["steel", "stainless"],
        thickness_range=ThicknessRange(0.5, 20),
        setup_time_multiplier=1.2,
    )
    job = Job("JOB-001", "Brackets", "high", datetime(2026, 3, 2, 12, 0), 60, "steel", 4.0, 10)

    print(machine)
    print(f"Can cut {job.job_id}? {machine.can_cut(job)}")
    print(f"Effective setup: {machine.effective_setup_time(job)} min")
