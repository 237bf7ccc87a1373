"""
Workflows package for LangGraph orchestration.

Contains input validation and the workflow orchestrator that runs every
engine stage using LangGraph state management.
"""

__all__ = ['OptimizationOrchestrator', 'validate_request', 'InputValidationError']
