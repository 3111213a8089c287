"""Tenant role registry and permission evaluation.

Permission strings are dot-segmented capabilities such as
``organizations.members.add``. A role may grant the universal wildcard ``*``
or a prefix wildcard such as ``organizations.*``, which covers every
permission below ``organizations.``.

Nothing here is cached: every check reads the current role definition, so a
permission change is visible to the very next check.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.errors import RoleNotFoundError
from saas_core.core.organizations import get_tenant_organization
from saas_core.core.repositories.memberships import MembershipRepository
from saas_core.core.repositories.roles import RoleRepository
from saas_core.models.membership import Membership
from saas_core.models.role import Role

logger = logging.getLogger(__name__)

WILDCARD = "*"
_PREFIX_WILDCARD_SUFFIX = ".*"


async def define_role(
    session: AsyncSession,
    tenant_id: str,
    name: str,
    permissions: Sequence[str],
    is_default: bool = False,
) -> Role:
    repository = RoleRepository(session, tenant_id)
    if is_default:
        await repository.clear_default()
    role = await repository.upsert(name, permissions, is_default)
    logger.info("Role defined tenant=%s role=%s permissions=%d", role.tenant_id, name, len(permissions))
    return role


async def get_role(session: AsyncSession, tenant_id: str, name: str) -> Role | None:
    return await RoleRepository(session, tenant_id).get_by_name(name)


async def get_roles(session: AsyncSession, tenant_id: str) -> list[Role]:
    return await RoleRepository(session, tenant_id).list()


async def delete_role(session: AsyncSession, tenant_id: str, name: str) -> bool:
    deleted = await RoleRepository(session, tenant_id).delete_by_name(name)
    if deleted:
        logger.info("Role deleted tenant=%s role=%s", tenant_id, name)
    return deleted


async def set_default_role(session: AsyncSession, tenant_id: str, name: str) -> Role:
    """Make ``name`` the tenant's only default role.

    All defaults are cleared before the named role is looked up, so a missing
    role leaves the tenant without a default; the clear is not undone.
    """
    repository = RoleRepository(session, tenant_id)
    await repository.clear_default()

    role = await repository.get_by_name(name)
    if role is None:
        logger.warning("Default role cleared but role=%s not found tenant=%s", name, tenant_id)
        raise RoleNotFoundError()

    role.is_default = True
    await session.flush()
    logger.info("Default role set tenant=%s role=%s", role.tenant_id, name)
    return role


async def get_default_role(session: AsyncSession, tenant_id: str) -> Role | None:
    return await RoleRepository(session, tenant_id).get_default()


async def update_role_permissions(
    session: AsyncSession,
    tenant_id: str,
    name: str,
    permissions: Sequence[str],
) -> Role:
    role = await RoleRepository(session, tenant_id).get_by_name(name)
    if role is None:
        raise RoleNotFoundError()

    role.permissions = list(permissions)
    await session.flush()
    logger.info("Role permissions updated tenant=%s role=%s", role.tenant_id, name)
    return role


async def get_user_role(session: AsyncSession, user_id: UUID, organization_id: UUID) -> str | None:
    membership = await MembershipRepository(session).get(organization_id, user_id)
    if membership is None:
        return None
    return membership.role or None


async def assign_role(
    session: AsyncSession,
    organization_id: UUID,
    user_id: UUID,
    role: str,
    tenant_id: str,
) -> Membership:
    await get_tenant_organization(session, organization_id, tenant_id)
    membership = await MembershipRepository(session).assign(organization_id, user_id, role)
    logger.info("Role assigned tenant=%s org=%s user=%s role=%s", tenant_id, organization_id, user_id, role)
    return membership


def matches_permission(granted_permissions: Iterable[str], requested: str) -> bool:
    for granted in granted_permissions:
        if granted == WILDCARD:
            return True

        if granted == requested:
            return True

        if granted.endswith(_PREFIX_WILDCARD_SUFFIX):
            prefix = granted[: -len(_PREFIX_WILDCARD_SUFFIX)]
            if requested.startswith(prefix + "."):
                return True

    return False


async def check_permission(
    session: AsyncSession,
    user_id: UUID,
    organization_id: UUID,
    permission: str,
    tenant_id: str,
) -> bool:
    role_name = await get_user_role(session, user_id, organization_id)
    if role_name is None:
        return False

    role = await get_role(session, tenant_id, role_name)
    if role is None:
        # The membership points at a role the tenant renamed or deleted.
        logger.debug("Dangling role=%s for org=%s tenant=%s", role_name, organization_id, tenant_id)
        return False

    return matches_permission(role.permissions, permission)
