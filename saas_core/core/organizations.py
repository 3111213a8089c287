from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.errors import OrganizationNotFoundError, TenantMismatchError
from saas_core.core.tenancy import validate_tenant_id, validate_tenant_ownership
from saas_core.models.organization import Organization

logger = logging.getLogger(__name__)


async def get_tenant_organization(
    session: AsyncSession,
    organization_id: UUID,
    tenant_id: str,
) -> Organization:
    """Load an organization for a write made on behalf of ``tenant_id``.

    Raises ``ORGANIZATION_NOT_FOUND`` for an unknown id and ``TENANT_MISMATCH``
    when the organization belongs to another tenant.
    """
    tenant_id = validate_tenant_id(tenant_id)
    organization = await session.get(Organization, organization_id)
    if organization is None:
        raise OrganizationNotFoundError()

    try:
        validate_tenant_ownership(organization.tenant_id, tenant_id, "Organization")
    except TenantMismatchError:
        logger.warning("Cross-tenant write rejected tenant=%s org=%s", tenant_id, organization_id)
        raise
    return organization
