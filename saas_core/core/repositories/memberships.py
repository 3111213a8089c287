from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.repositories.base import upsert
from saas_core.models.membership import Membership


class MembershipRepository:
    """Membership rows carry no tenant column; writes reach them through
    ``assign_role``, which checks the organization against the caller's tenant."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, organization_id: UUID, user_id: UUID) -> Membership | None:
        result = await self.session.execute(
            select(Membership)
            .where(Membership.organization_id == organization_id)
            .where(Membership.user_id == user_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def assign(self, organization_id: UUID, user_id: UUID, role: str) -> Membership:
        return await upsert(
            self.session,
            Membership,
            {"organization_id": organization_id, "user_id": user_id, "role": role},
            conflict_columns=("organization_id", "user_id"),
            update_columns=("role",),
        )
