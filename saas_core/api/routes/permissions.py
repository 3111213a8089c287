from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.auth import TenantContext, require_tenant_context
from saas_core.core.db import get_db_session
from saas_core.core.permissions import assign_role, check_permission
from saas_core.schemas.roles import (
    MembershipAssignRequest,
    MembershipResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
)

router = APIRouter(tags=["permissions"])


@router.post("/permissions/check", response_model=PermissionCheckResponse)
async def check_member_permission(
    payload: PermissionCheckRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> PermissionCheckResponse:
    allowed = await check_permission(
        session,
        payload.user_id,
        payload.organization_id,
        payload.permission,
        context.tenant_id,
    )
    return PermissionCheckResponse(permission=payload.permission, allowed=allowed)


@router.put(
    "/organizations/{organization_id}/members/{user_id}/role",
    response_model=MembershipResponse,
)
async def assign_member_role(
    organization_id: UUID,
    user_id: UUID,
    payload: MembershipAssignRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> MembershipResponse:
    membership = await assign_role(session, organization_id, user_id, payload.role, context.tenant_id)
    await session.commit()
    return MembershipResponse.model_validate(membership)
