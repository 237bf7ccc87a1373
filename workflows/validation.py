"""
Request Validation

Checks an OptimizationRequest before any engine stage runs. The first
failing check wins and its message is shown to the user as-is.
"""

from models.request import OptimizationRequest


class InputValidationError(ValueError):
    """The request cannot be optimized as submitted."""


def validate_request(request: OptimizationRequest) -> None:
    """
    Validate the input bundle.

    Args:
        request: Request to check

    Raises:
        InputValidationError: with exactly one user-facing message
    """
    if not request.jobs:
        raise InputValidationError("Job queue cannot be empty")

    if not request.machines:
        raise InputValidationError("At least one machine must be available")

    if request.resources.available_operators < 1:
        raise InputValidationError("At least one operator must be available")
