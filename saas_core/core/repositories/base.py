from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from saas_core.core.context import get_current_tenant_id
from saas_core.core.db import apply_rls_tenant_context, dialect_name
from saas_core.core.tenancy import validate_tenant_id
from saas_core.models.base import EntityBase, TenantScopedBase, utcnow

ModelT = TypeVar("ModelT", bound=TenantScopedBase)
EntityT = TypeVar("EntityT", bound=EntityBase)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class TenantContextMissingError(RuntimeError):
    pass


async def upsert(
    session: AsyncSession,
    model: type[EntityT],
    values: Mapping[str, Any],
    *,
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> EntityT:
    """Insert ``values`` or update the row already holding the same natural key.

    Runs as a single ``INSERT ... ON CONFLICT DO UPDATE ... RETURNING`` so two
    concurrent writers can never create duplicate rows; the loser of the race
    updates the winner's row and keeps its primary key.
    """
    dialect = dialect_name(session)
    insert_factory = _INSERT_BY_DIALECT.get(dialect)
    if insert_factory is None:
        raise NotImplementedError(f"Upsert is not supported for the {dialect} dialect")

    stmt = insert_factory(model).values(**values)
    assignments: dict[str, Any] = {column: stmt.excluded[column] for column in update_columns}
    assignments["updated_at"] = utcnow()
    stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=assignments)

    result = await session.scalars(
        stmt.returning(model),
        execution_options={"populate_existing": True},
    )
    return result.one()


class TenantRepository(Generic[ModelT]):
    def __init__(
        self,
        session: AsyncSession,
        model: type[ModelT],
        tenant_id: str | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self._tenant_id = tenant_id

    @property
    def tenant_id(self) -> str:
        tenant_id = self._tenant_id if self._tenant_id is not None else get_current_tenant_id()
        if tenant_id is None:
            raise TenantContextMissingError("Tenant context is missing from the current request")
        return validate_tenant_id(tenant_id)

    async def _apply_rls(self) -> None:
        await apply_rls_tenant_context(self.session, self.tenant_id)

    def _scoped_select(self) -> Select[tuple[ModelT]]:
        return select(self.model).where(self.model.tenant_id == self.tenant_id)

    async def _upsert(
        self,
        values: Mapping[str, Any],
        *,
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> ModelT:
        await self._apply_rls()
        payload = dict(values)
        payload["tenant_id"] = self.tenant_id
        return await upsert(
            self.session,
            self.model,
            payload,
            conflict_columns=conflict_columns,
            update_columns=update_columns,
        )

    async def create(self, **values: object) -> ModelT:
        await self._apply_rls()
        payload = dict(values)
        payload.setdefault("tenant_id", self.tenant_id)
        instance = self.model(**payload)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get(self, entity_id: UUID) -> ModelT | None:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().where(self.model.id == entity_id)
        )
        return result.scalar_one_or_none()

    async def list(self, *, limit: int | None = None, offset: int = 0) -> list[ModelT]:
        await self._apply_rls()
        stmt = self._scoped_select().order_by(self.model.created_at).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, entity_id: UUID, **values: object) -> ModelT | None:
        instance = await self.get(entity_id)
        if instance is None:
            return None

        for field, value in values.items():
            if field in {"id", "tenant_id"}:
                continue
            setattr(instance, field, value)

        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, entity_id: UUID) -> bool:
        await self._apply_rls()
        result = await self.session.execute(
            delete(self.model)
            .where(self.model.id == entity_id)
            .where(self.model.tenant_id == self.tenant_id)
        )
        return (result.rowcount or 0) > 0
