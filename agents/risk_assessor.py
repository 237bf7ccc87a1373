"""
Risk Assessor

Classifies overall schedule risk from queue and resource characteristics.

Risk ladder (checked in order, later rungs override earlier ones):
    low       default
    medium    urgent jobs > 2  or jobs > 8
    high      urgent jobs > 3  or jobs > 12 or available machines < 2
    critical  urgent jobs > 5  or jobs > 15 or available machines < 1

Thresholds come from ``SchedulingPolicy.risk``.
"""

from typing import List, Optional

from models.job import Job
from models.machine import Machine
from models.constraints import ResourceConstraints
from models.policy import SchedulingPolicy
from models.schedule import Schedule
from models.analysis import RiskAssessment, DeliveryRisk, BufferRecommendation


CONTINGENCY_PLANS = [
    "Activate backup machines if primary machines fail",
    "Implement overtime shifts for critical jobs",
    "Prioritize high-value customers for resource allocation",
    "Maintain emergency material inventory",
]

DELIVERY_MITIGATION = {
    "high": "Dedicated machine assignment",
    "medium": "Expedite and monitor progress",
}


class RiskAssessor:

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.policy = policy or SchedulingPolicy()

    def classify(self, urgent_jobs: int, job_count: int, available_machines: int) -> str:
        """Walk the risk ladder; the last rung whose condition holds wins."""
        t = self.policy.risk
        level = "low"
        if urgent_jobs > t.medium_urgent_jobs or job_count > t.medium_job_count:
            level = "medium"
        if (urgent_jobs > t.high_urgent_jobs or job_count > t.high_job_count
                or available_machines < t.high_min_machines):
            level = "high"
        if (urgent_jobs > t.critical_urgent_jobs or job_count > t.critical_job_count
                or available_machines < t.critical_min_machines):
            level = "critical"
        return level

    def risk_factors(
        self,
        urgent_jobs: int,
        job_count: int,
        available_machines: int,
        available_operators: int
    ) -> List[str]:
        t = self.policy.risk
        factors = []
        if urgent_jobs > t.medium_urgent_jobs:
            factors.append("High number of urgent jobs in queue")
        if job_count > t.large_queue:
            factors.append("Large job queue may cause delays")
        if available_machines < t.high_min_machines:
            factors.append("Limited machine availability")
        if available_operators < t.min_operators:
            factors.append("Insufficient operator coverage")
        return factors

    def buffer_adequacy(self, job_count: int) -> float:
        t = self.policy.risk
        return max(t.buffer_adequacy_floor, 100 - job_count * t.buffer_penalty_per_job)

    def assess(
        self,
        jobs: List[Job],
        machines: List[Machine],
        resources: ResourceConstraints,
        schedule: Optional[Schedule] = None
    ) -> RiskAssessment:
        """
        Full risk assessment for a queue.

        Args:
            jobs: Job queue
            machines: Machine pool
            resources: Operator and stock constraints
            schedule: Built schedule, used for per-job buffer recommendations

        Returns:
            RiskAssessment
        """
        urgent_jobs = sum(1 for job in jobs if job.is_urgent)
        job_count = len(jobs)
        available_machines = sum(1 for m in machines if m.is_available)

        delivery_risk = []
        for job in jobs:
            if not job.is_urgent:
                continue
            level = "high" if job.priority == "critical" else "medium"
            delivery_risk.append(DeliveryRisk(job.job_id, level, DELIVERY_MITIGATION[level]))

        buffer_recommendations = []
        for sj in schedule or []:
            buffer_recommendations.append(BufferRecommendation(
                job_id=sj.job_id,
                recommended_buffer=max(15.0, sj.job.estimated_duration * 0.15),
                reason="Standard safety buffer for schedule stability",
            ))

        return RiskAssessment(
            schedule_risk=self.classify(urgent_jobs, job_count, available_machines),
            risk_factors=self.risk_factors(
                urgent_jobs, job_count, available_machines, resources.available_operators
            ),
            contingency_plans=list(CONTINGENCY_PLANS),
            buffer_adequacy=self.buffer_adequacy(job_count),
            delivery_risk=delivery_risk,
            buffer_recommendations=buffer_recommendations,
            urgent_jobs=urgent_jobs,
            available_machines=available_machines,
        )
