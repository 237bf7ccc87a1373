"""
Cost Model

Simplified linear cost heuristic for a schedule period:
    - operating cost:  jobs * 150
    - overtime cost:   max(0, (jobs - 5) * 50)
    - setup cost:      sum(nominal setup minutes * 3)
    - tardiness and opportunity cost: 0 for an optimized schedule
    - optimization benefit: jobs * 75

All rates come from ``SchedulingPolicy.cost``. Machine-hour and labor rates
are not modelled.
"""

from typing import List, Optional

from models.job import Job
from models.policy import SchedulingPolicy
from models.analysis import CostAnalysis, CostBreakdownItem


class CostModel:

    def __init__(self, policy: Optional[SchedulingPolicy] = None):
        self.policy = policy or SchedulingPolicy()

    def analyze(self, jobs: List[Job]) -> CostAnalysis:
        """
        Cost figures for the job queue.

        Args:
            jobs: The full job queue

        Returns:
            CostAnalysis with a fixed-percentage breakdown
        """
        rates = self.policy.cost
        job_count = len(jobs)

        operating = job_count * rates.cost_per_job
        overtime = max(0.0, (job_count - rates.overtime_job_threshold) * rates.overtime_cost_per_job)
        setup = sum(job.setup_time * rates.setup_cost_per_minute for job in jobs)

        amounts = {
            "Operating Cost": operating,
            "Setup Cost": setup,
            "Overtime Cost": overtime,
        }
        breakdown = [
            CostBreakdownItem(category, amounts.get(category, 0.0), percentage)
            for category, percentage in rates.breakdown_percentages.items()
        ]

        return CostAnalysis(
            total_operating_cost=operating,
            overtime_cost=overtime,
            setup_cost=setup,
            tardiness_penalty=0.0,
            opportunity_cost=0.0,
            profit_optimization=job_count * rates.optimization_benefit_per_job,
            cost_breakdown=breakdown,
        )
