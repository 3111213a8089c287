"""Typed failures raised by the access core.

Every error carries a machine-readable ``code``, a human ``message`` and the
HTTP status the API layer answers with. Authorization checks that simply find
no data return ``False`` instead of raising one of these.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    code: str = "APP_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class RoleNotFoundError(AppError):
    code = "ROLE_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Role not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class TierNotFoundError(AppError):
    code = "TIER_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Subscription tier not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SubscriptionNotFoundError(AppError):
    code = "SUBSCRIPTION_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Subscription not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class InvalidTenantError(AppError):
    code = "INVALID_TENANT"
    status_code = 400


class TenantMismatchError(AppError):
    code = "TENANT_MISMATCH"
    status_code = 403


class InvalidApiKeyError(AppError):
    code = "INVALID_API_KEY"
    status_code = 401


class MissingAuthError(AppError):
    code = "MISSING_AUTH"
    status_code = 401

    def __init__(self, message: str = "Missing Authorization header", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class UsageLimitExceededError(AppError):
    code = "USAGE_LIMIT_EXCEEDED"
    status_code = 429


class FeatureNotAvailableError(AppError):
    code = "FEATURE_NOT_AVAILABLE"
    status_code = 403


class OrganizationNotFoundError(AppError):
    code = "ORGANIZATION_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Organization not found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
