from __future__ import annotations

from saas_core.core.errors import InvalidTenantError, TenantMismatchError

_FORBIDDEN_TENANT_CHARACTERS = ("'", '"', ";")


def validate_tenant_id(tenant_id: str | None) -> str:
    if tenant_id is None or not tenant_id.strip():
        raise InvalidTenantError("Tenant ID is required")

    if any(character in tenant_id for character in _FORBIDDEN_TENANT_CHARACTERS):
        raise InvalidTenantError("Invalid tenant ID format")

    return tenant_id.strip()


def validate_tenant_ownership(
    resource_tenant_id: str,
    expected_tenant_id: str,
    resource_type: str = "Resource",
) -> None:
    if resource_tenant_id != expected_tenant_id:
        raise TenantMismatchError(f"{resource_type} does not belong to the specified tenant")
