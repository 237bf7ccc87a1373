"""
Customer Impact Analyzer

Translates the schedule into delivery performance per customer tier and a
notification plan for every job.
"""

from typing import Dict, List, Optional

from models.job import CUSTOMER_TIERS
from models.policy import SchedulingPolicy
from models.schedule import Schedule
from models.analysis import CustomerImpact, TierDelivery, CustomerNotification


def satisfaction_from_on_time(on_time_rate: float) -> float:
    """Map an on-time rate (0-100) onto the 1-10 satisfaction scale."""
    return round(1 + 9 * on_time_rate / 100, 1)


class CustomerImpactAnalyzer:

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.policy = policy or SchedulingPolicy()

    def analyze(self, schedule: Schedule) -> CustomerImpact:
        """
        Delivery performance and communication plan.

        The overall satisfaction score averages tier satisfaction weighted by
        each tier's customer weight and job count.
        """
        by_tier: Dict[str, List] = {}
        for sj in schedule:
            by_tier.setdefault(sj.job.customer_importance, []).append(sj)
        for item in schedule.unassignable:
            by_tier.setdefault(item.job.customer_importance, [])

        delivery = []
        known = [t for t in CUSTOMER_TIERS if t in by_tier]
        others = sorted(t for t in by_tier if t not in CUSTOMER_TIERS)
        for tier in known + others:
            jobs = by_tier[tier]
            missing = sum(1 for u in schedule.unassignable if u.job.customer_importance == tier)
            total = len(jobs) + missing
            on_time = sum(1 for sj in jobs if not sj.is_late())
            rate = on_time / total * 100 if total else 0.0
            delivery.append(TierDelivery(
                customer_tier=tier,
                job_count=total,
                on_time_rate=round(rate, 1),
                satisfaction=satisfaction_from_on_time(rate),
            ))

        weighted = 0.0
        weight_total = 0.0
        for row in delivery:
            weight = self.policy.customer_weight(row.customer_tier) * row.job_count
            weighted += row.satisfaction * weight
            weight_total += weight
        score = round(weighted / weight_total, 1) if weight_total else 0.0

        return CustomerImpact(
            customer_satisfaction_score=score,
            delivery_performance=delivery,
            communication_plan=self._communication_plan(schedule),
        )

    def _communication_plan(self, schedule: Schedule) -> List[CustomerNotification]:
        plan = []
        for sj in schedule:
            if sj.is_late():
                plan.append(CustomerNotification(
                    sj.job_id,
                    "Revised delivery estimate: completion expected after due date",
                    "Immediately",
                ))
            else:
                plan.append(CustomerNotification(
                    sj.job_id,
                    "Scheduled confirmation with delivery estimate",
                    "24 hours before start",
                ))
        for item in schedule.unassignable:
            plan.append(CustomerNotification(
                item.job.job_id,
                "Delivery at risk: no compatible machine currently available",
                "Immediately",
            ))
        return plan
