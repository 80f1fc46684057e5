"""
Governance errors.

ConfigurationError covers lookups against policy tables (unknown environment or
operation class). StoreUnavailable wraps transient persistence failures and
InvariantViolation rejects malformed policy tables at load time.
"""

from typing import Optional


class GovernanceError(Exception):
    """Base class for all log governance errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ConfigurationError(GovernanceError):
    """A policy lookup referenced an unknown environment or operation class."""


class StoreError(GovernanceError):
    """Base class for event store failures."""


class InvalidEnvironment(ConfigurationError, StoreError):
    """Append refused because the entry's environment has no retention policy."""

    def __init__(self, environment: str):
        super().__init__(
            f"No retention policy configured for environment '{environment}'",
            context={"environment": environment},
        )
        self.environment = environment


class StoreUnavailable(StoreError):
    """The underlying store could not be reached or rejected the operation."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause else ""
        super().__init__(
            f"Event store unavailable during {operation}{detail}",
            context={"operation": operation},
        )
        self.operation = operation
        self.cause = cause


class InvariantViolation(GovernanceError):
    """A policy table failed validation and was not activated."""

    def __init__(self, message: str, violations: Optional[list] = None):
        super().__init__(message, context={"violations": violations or []})
        self.violations = violations or []
