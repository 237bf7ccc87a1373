"""
Utility functions package for the Laser Job Queue Optimizer.

This package contains helper utilities:
- config_loader: Load scheduling policy and requests from YAML/JSON
- data_generator: Generate sample job queues and CSV import/export
- baseline_scheduler: Single-line reference scheduler for comparison
- logging_conf: Logging setup for scripts and the demo entry point
"""

__all__ = ['config_loader', 'data_generator', 'baseline_scheduler', 'logging_conf']
