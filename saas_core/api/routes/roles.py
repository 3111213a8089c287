from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.auth import TenantContext, require_tenant_context
from saas_core.core.db import get_db_session
from saas_core.core.errors import RoleNotFoundError
from saas_core.core.permissions import (
    define_role,
    delete_role,
    get_default_role,
    get_role,
    get_roles,
    set_default_role,
    update_role_permissions,
)
from saas_core.schemas.roles import RoleDefineRequest, RolePermissionsUpdateRequest, RoleResponse

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[RoleResponse]:
    roles = await get_roles(session, context.tenant_id)
    return [RoleResponse.model_validate(role) for role in roles]


@router.get("/default", response_model=RoleResponse)
async def read_default_role(
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    role = await get_default_role(session, context.tenant_id)
    if role is None:
        raise RoleNotFoundError("No default role configured")
    return RoleResponse.model_validate(role)


@router.get("/{name}", response_model=RoleResponse)
async def read_role(
    name: str,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    role = await get_role(session, context.tenant_id, name)
    if role is None:
        raise RoleNotFoundError()
    return RoleResponse.model_validate(role)


@router.put("/{name}", response_model=RoleResponse)
async def upsert_role(
    name: str,
    payload: RoleDefineRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    role = await define_role(
        session,
        context.tenant_id,
        name,
        payload.permissions,
        is_default=payload.is_default,
    )
    await session.commit()
    return RoleResponse.model_validate(role)


@router.patch("/{name}/permissions", response_model=RoleResponse)
async def replace_role_permissions(
    name: str,
    payload: RolePermissionsUpdateRequest,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    role = await update_role_permissions(session, context.tenant_id, name, payload.permissions)
    await session.commit()
    return RoleResponse.model_validate(role)


@router.post("/{name}/default", response_model=RoleResponse)
async def make_default_role(
    name: str,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> RoleResponse:
    try:
        role = await set_default_role(session, context.tenant_id, name)
    except RoleNotFoundError:
        # The tenant is left without a default rather than rolled back.
        await session.commit()
        raise
    await session.commit()
    return RoleResponse.model_validate(role)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_role(
    name: str,
    context: TenantContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    deleted = await delete_role(session, context.tenant_id, name)
    if not deleted:
        raise RoleNotFoundError()
    await session.commit()
