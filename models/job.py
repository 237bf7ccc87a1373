"""
Job Model - Represents a laser-cutting job waiting in the queue

This module defines the Job class which encapsulates all information about
a cutting job including its material, timing, priority and commercial value.

Key Attributes:
    - job_id: Unique identifier
    - priority: critical / urgent / high / normal / low
    - due_date: Delivery deadline (datetime)
    - estimated_duration: Cutting time in minutes
    - material_type / thickness: Used to match the job to a machine
    - setup_time: Nominal changeover time in minutes
    - customer_importance: standard / preferred / vip
    - profit_margin: Margin in percent
"""

from datetime import datetime, timezone
from typing import List, Dict, Any
from dataclasses import dataclass, field
import json


PRIORITY_TIERS = ("critical", "urgent", "high", "normal", "low")
CUSTOMER_TIERS = ("standard", "preferred", "vip")
URGENT_TIERS = ("critical", "urgent")


def pick(data: Dict[str, Any], key: str, camel_key: str, default: Any = None) -> Any:
    """Read a value by its snake_case key, falling back to the form's camelCase key."""
    if key in data:
        return data[key]
    return data.get(camel_key, default)


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO-8601 string (a trailing 'Z' is accepted) into a datetime."""
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_utc(value: datetime) -> datetime:
    """Naive values are read as UTC; aware values are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class Job:
    """
    Represents a single job in the laser-cutting queue.

    Unknown priority or customer tiers are accepted as-is; the priority
    scorer falls back to its default weights for them.

    Example:
        >>> job = Job(
        ...     job_id="JOB-001",
        ...     job_name="Bracket batch",
        ...     priority="urgent",
        ...     due_date=datetime(2026, 3, 2, 16, 0),
        ...     estimated_duration=90,
        ...     material_type="steel",
        ...     thickness=3.0,
        ...     setup_time=15,
        ... )
    """

    job_id: str                          # Unique job identifier (e.g., "JOB-001")
    job_name: str
    priority: str                        # critical / urgent / high / normal / low
    due_date: datetime
    estimated_duration: float            # Cutting duration in minutes
    material_type: str                   # e.g. "steel", "aluminum"
    thickness: float                     # mm
    setup_time: float = 0.0              # Nominal setup minutes before cutting
    part_count: int = 1
    customer_importance: str = "standard"
    profit_margin: float = 0.0           # percent
    dependencies: List[str] = field(default_factory=list)  # Job ids, informational unless enforced

    def __post_init__(self):
        """Validate job data after initialization."""
        if self.estimated_duration < 0:
            raise ValueError(
                f"Estimated duration must not be negative, got: {self.estimated_duration}"
            )

        if self.setup_time < 0:
            raise ValueError(f"Setup time must not be negative, got: {self.setup_time}")

    @property
    def is_urgent(self) -> bool:
        """Check if this job sits in the urgent or critical tier."""
        return self.priority in URGENT_TIERS

    def hours_until_due(self, now: datetime) -> float:
        """Hours between ``now`` and the due date (negative when overdue)."""
        return (self.due_date - now).total_seconds() / 3600

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert job to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the job
        """
        return {
            "job_id": self.job_id,
            "job_name": self.job_name,
            "priority": self.priority,
            "due_date": self.due_date.isoformat(),
            "estimated_duration": self.estimated_duration,
            "material_type": self.material_type,
            "thickness": self.thickness,
            "setup_time": self.setup_time,
            "part_count": self.part_count,
            "customer_importance": self.customer_importance,
            "profit_margin": self.profit_margin,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Job':
        """
        Create a Job instance from a dictionary.

        Accepts both snake_case keys and the form's camelCase keys
        (``jobId``, ``dueDate``, ``estimatedDuration`` ...).

        Args:
            data: Dictionary containing job data

        Returns:
            Job instance
        """
        return cls(
            job_id=str(pick(data, "job_id", "jobId")),
            job_name=pick(data, "job_name", "jobName", ""),
            priority=pick(data, "priority", "priority", "normal"),
            due_date=parse_datetime(pick(data, "due_date", "dueDate")),
            estimated_duration=float(pick(data, "estimated_duration", "estimatedDuration", 0)),
            material_type=pick(data, "material_type", "materialType", ""),
            thickness=float(pick(data, "thickness", "thickness", 0)),
            setup_time=float(pick(data, "setup_time", "setupTime", 0)),
            part_count=int(pick(data, "part_count", "partCount", 1)),
            customer_importance=pick(data, "customer_importance", "customerImportance", "standard"),
            profit_margin=float(pick(data, "profit_margin", "profitMargin", 0)),
            dependencies=list(pick(data, "dependencies", "dependencies", []) or []),
        )

    def __str__(self) -> str:
        """String representation for logging and debugging."""
        urgent_flag = " [URGENT]" if self.is_urgent else ""
        return (f"Job({self.job_id}: {self.material_type} {self.thickness}mm, "
                f"{self.estimated_duration}min, due {self.due_date:%Y-%m-%d %H:%M}{urgent_flag})")


# Example usage and testing
if __name__ == "__main__":
    critical_job = Job(
        job_id="JOB-001",
        job_name="Chassis plates",
        priority="critical",
        due_date=datetime(2026, 3, 2, 12, 0),
        estimated_duration=120,
        material_type="steel",
        thickness=6.0,
        setup_time=20,
        customer_importance="vip",
        profit_margin=28,
    )

    print(critical_job)
    print(f"Is urgent? {critical_job.is_urgent}")
    print(f"Hours until due from 2026-03-01 08:00: "
          f"{critical_job.hours_until_due(datetime(2026, 3, 1, 8, 0)):.1f}")

    job_dict = critical_job.to_dict()
    print(f"\nAs dict: {json.dumps(job_dict, indent=2)}")

    reconstructed = Job.from_dict(job_dict)
    print(f"\nReconstructed: {reconstructed}")
