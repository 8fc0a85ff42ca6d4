"""
Domain exceptions raised by the SkillForge core services.

Services raise these; the API layer translates them into HTTP responses
through the handler registered in app/main.py.
"""

from typing import Any, Dict, Optional


class SkillForgeError(Exception):
    """Base class for recoverable errors reported back to the caller."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidArgumentError(SkillForgeError, ValueError):
    """Malformed input: non-positive amounts, self-transfer, out-of-range values."""

    status_code = 400


class NotFoundError(SkillForgeError):
    """A referenced user, skill or exchange does not exist."""

    status_code = 404


class ConflictError(SkillForgeError):
    """Unique constraint clash (skill name, user email, duplicate review)."""

    status_code = 409


class InvalidOperationError(SkillForgeError):
    """Business rule violation."""

    status_code = 400


class InsufficientCreditsError(InvalidOperationError):

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Insufficient credits. Required: {required}, Available: {available}",
            details={"required_credits": required, "available_credits": available},
        )


class InvalidTransitionError(InvalidOperationError):

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot change exchange status from {current} to {target}",
            details={"current_status": current, "target_status": target},
        )


class ExchangeAuthorizationError(InvalidOperationError):
    """The acting user is not allowed to perform this transition."""

    status_code = 403
