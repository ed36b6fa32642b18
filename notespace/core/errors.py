"""Domain errors raised by services and rendered as ``{"error": ...}`` bodies.

Every error carries the HTTP status it maps to, so the exception handlers in
``notespace.main`` never need to know individual error types.
"""

from typing import Any


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_body(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class ValidationError(AppError):
    """Bad input shape or length."""

    status_code = 400


class Unauthenticated(AppError):
    """Missing, invalid or expired token, or the principal's records vanished."""

    status_code = 401


class Forbidden(AppError):
    """Role, ownership or same-tenant violation."""

    status_code = 403


class NotFound(AppError):
    """Resource absent, or owned by another tenant."""

    status_code = 404


class Conflict(AppError):
    """Duplicate email or tenant slug."""

    status_code = 409


class LimitReached(Forbidden):
    """The tenant's plan does not allow another note."""

    def __init__(self, note_count: int, note_limit: int, tenant_slug: str) -> None:
        super().__init__(
            "Note limit reached. Upgrade to Pro for unlimited notes.",
            limit_reached=True,
            note_count=note_count,
            note_limit=note_limit,
            upgrade_url=f"/v1/tenants/{tenant_slug}/upgrade",
        )


class AlreadyOnPro(AppError):
    status_code = 400

    def __init__(self) -> None:
        super().__init__("Tenant is already on the Pro plan")


class InvariantViolation(AppError):
    """The change would leave the tenant without an admin."""

    status_code = 400
