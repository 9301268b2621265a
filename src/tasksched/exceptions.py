"""Custom exceptions for tasksched.

The scheduling engine itself never raises for bad input; it reports
diagnostics. These exceptions belong to the outer layer (project files, CLI).
"""


class TaskschedError(Exception):
    """Base exception for all tasksched errors."""

    pass


class ValidationError(TaskschedError):
    """Raised when a project definition fails validation."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a referenced task or duration label does not exist."""

    pass


class ParseError(TaskschedError):
    """Raised when YAML parsing fails."""

    pass
