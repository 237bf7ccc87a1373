"""
Core data models package for the Laser Job Queue Optimizer.

This package contains all data structures used throughout the system:
- Job: A laser-cutting job waiting in the queue
- Machine: A cutting machine with material/thickness capabilities
- OperationalConstraints / ResourceConstraints / OptimizationGoals: run settings
- OptimizationRequest: The complete input bundle
- ScheduledJob / Schedule: The sequenced queue
- SchedulingPolicy: Tunable weights, thresholds and rates
- OptimizationResult: The output bundle with all derived analyses
"""

__all__ = [
    'Job', 'Machine', 'ThicknessRange',
    'OperationalConstraints', 'ResourceConstraints', 'OptimizationGoals', 'QualityRequirements',
    'OptimizationRequest', 'ScheduledJob', 'UnassignableJob', 'Schedule',
    'SchedulingPolicy', 'OptimizationResult',
]
