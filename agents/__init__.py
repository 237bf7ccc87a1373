"""
Scheduling engine package for the Laser Job Queue Optimizer.

This package contains all agent implementations:
- PriorityScorer / MachineMatcher / ScheduleBuilder: Sequencing
- PerformanceAnalyzer / CostModel / RiskAssessor: Schedule projections
- ResourceAnalyzer / CustomerImpactAnalyzer: Resource and delivery views
- ScenarioGenerator: Alternative goal-weight schedules
- InsightEngine: Rule-driven insights, alerts and recommendations
- ConstraintAgent: Schedule audit against shop rules
- Supervisor Agent: Optional LLM executive summary
"""

__all__ = [
    'PriorityScorer', 'MachineMatcher', 'ScheduleBuilder',
    'PerformanceAnalyzer', 'CostModel', 'RiskAssessor',
    'ResourceAnalyzer', 'CustomerImpactAnalyzer', 'ScenarioGenerator',
    'InsightEngine', 'ConstraintAgent', 'SupervisorAgent',
]
