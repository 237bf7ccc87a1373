"""
Scenario Generator

Produces the alternative schedules shown next to the optimized one. Every
scenario re-runs the ScheduleBuilder with its own goal weights, so the
figures reported are those of a schedule that was actually built.

Profiles come from ``SchedulingPolicy.scenarios``. A profile without
weights uses the caller's goals and therefore reproduces the main schedule.
"""

import logging
from datetime import datetime
from typing import List, Optional

from models.request import OptimizationRequest
from models.policy import SchedulingPolicy, ScenarioProfile
from models.analysis import Scenario

from agents.schedule_builder import ScheduleBuilder
from agents.performance_analyzer import PerformanceAnalyzer
from agents.cost_model import CostModel

logger = logging.getLogger(__name__)


class ScenarioGenerator:

    def __init__(
        self,
        policy: Optional[SchedulingPolicy] = None,
        builder: Optional[ScheduleBuilder] = None,
        performance: Optional[PerformanceAnalyzer] = None,
        cost_model: Optional[CostModel] = None
    ):
        self.policy = policy or SchedulingPolicy()
        self.builder = builder or ScheduleBuilder(self.policy)
        self.performance = performance or PerformanceAnalyzer()
        self.cost_model = cost_model or CostModel(self.policy)

    def generate(self, request: OptimizationRequest, now: datetime) -> List[Scenario]:
        """
        Build one alternative schedule per configured profile.

        Args:
            request: Input bundle
            now: Reference time shared with the main schedule

        Returns:
            Scenarios in profile order
        """
        costs = self.cost_model.analyze(request.jobs)
        return [self._run(profile, request, now, costs.total_cost) for profile in self.policy.scenarios]

    def _run(
        self,
        profile: ScenarioProfile,
        request: OptimizationRequest,
        now: datetime,
        total_cost: float
    ) -> Scenario:
        goals = request.goals
        if profile.weights is not None:
            goals = goals.with_weights(profile.weights)

        schedule = self.builder.build(request.jobs, request.machines, goals, now)
        metrics = self.performance.analyze(schedule, request.machines, now)

        logger.debug(
            "Scenario %s: elapsed %.2fh, on-time %.1f%%",
            profile.name, schedule.elapsed_hours(), metrics.on_time_delivery_rate,
        )

        return Scenario(
            scenario_name=profile.name,
            description=profile.description,
            makespan=round(schedule.elapsed_hours(), 2),
            on_time_rate=round(metrics.on_time_delivery_rate, 1),
            total_cost=total_cost,
            tradeoffs=list(profile.tradeoffs),
            total_work_hours=round(metrics.total_makespan, 2),
            job_order=[sj.job_id for sj in schedule],
        )
