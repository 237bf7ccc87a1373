"""
Priority Scorer

Computes the numeric priority of every job in the queue from its priority
tier, customer tier, due-date urgency and profit margin, weighted by the
caller's optimization goals.

    score = tier_weight * urgency_goal
          + customer_weight * customer_satisfaction_goal
          + urgency_weight * 5
          + (profit_margin / 100) * profitability_goal * 10

Deterministic for a fixed reference time ``now``; never reads the clock.
"""

from datetime import datetime
from typing import List, Tuple, Optional

from models.job import Job
from models.constraints import OptimizationGoals
from models.policy import SchedulingPolicy


class PriorityScorer:
    """Scores and ranks jobs. Unknown tiers fall back to the policy defaults."""

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.policy = policy or SchedulingPolicy()

    def urgency_weight(self, job: Job, now: datetime) -> float:
        """
        Map hours until due to an urgency weight.

        Args:
            job: Job to rate
            now: Reference time

        Returns:
            Weight of the first band the job falls under, else the default
        """
        hours_until_due = job.hours_until_due(now)
        for limit, weight in self.policy.urgency_bands:
            if hours_until_due < limit:
                return weight
        return self.policy.default_urgency_weight

    def score(self, job: Job, goals: OptimizationGoals, now: datetime) -> float:
        """Priority score of one job; higher runs earlier."""
        policy = self.policy
        tier_weight = policy.priority_weight(job.priority)
        customer_weight = policy.customer_weight(job.customer_importance)
        profit_weight = job.profit_margin / 100

        return (
            tier_weight * goals.urgency_weight
            + customer_weight * goals.customer_satisfaction_weight
            + self.urgency_weight(job, now) * policy.urgency_multiplier
            + profit_weight * goals.profitability_weight * policy.profit_multiplier
        )

    def rank(
        self,
        jobs: List[Job],
        goals: OptimizationGoals,
        now: datetime
    ) -> List[Tuple[Job, float]]:
        """
        Sort jobs by score, highest first.

        The sort is stable: jobs with equal scores keep their queue order.

        Returns:
            List of (job, score) pairs
        """
        scored = [(job, self.score(job, goals, now)) for job in jobs]
        return sorted(scored, key=lambda pair: -pair[1])

    def __str__(self) -> str:
        return "PriorityScorer(tier + customer + urgency + profit)"
