from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RoleDefineRequest(BaseModel):
    permissions: list[str] = Field(default_factory=list)
    is_default: bool = False


class RolePermissionsUpdateRequest(BaseModel):
    permissions: list[str]


class RoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    permissions: list[str]
    is_default: bool


class MembershipAssignRequest(BaseModel):
    role: str = Field(min_length=1, max_length=120)


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: UUID
    user_id: UUID
    role: str


class PermissionCheckRequest(BaseModel):
    user_id: UUID
    organization_id: UUID
    permission: str = Field(min_length=1)


class PermissionCheckResponse(BaseModel):
    permission: str
    allowed: bool
