from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.dialects import postgresql

from saas_core.core.context import reset_current_tenant_id, set_current_tenant_id
from saas_core.core.errors import InvalidTenantError
from saas_core.core.repositories.base import TenantContextMissingError, TenantRepository
from saas_core.core.repositories.subscriptions import SubscriptionRepository
from saas_core.models.role import Role


def test_tenant_id_missing_raises() -> None:
    repo = TenantRepository(session=Mock(), model=Role)

    with pytest.raises(TenantContextMissingError):
        _ = repo.tenant_id


def test_explicit_tenant_id_wins_over_context() -> None:
    token = set_current_tenant_id("tenant_from_request")
    try:
        repo = TenantRepository(session=Mock(), model=Role, tenant_id="tenant_explicit")
        assert repo.tenant_id == "tenant_explicit"
    finally:
        reset_current_tenant_id(token)


@pytest.mark.parametrize("tenant_id", ["   ", "acme'; DROP TABLE roles", 'tenant"x'])
def test_invalid_tenant_id_is_rejected(tenant_id: str) -> None:
    repo = TenantRepository(session=Mock(), model=Role, tenant_id=tenant_id)

    with pytest.raises(InvalidTenantError):
        _ = repo.tenant_id


def test_scoped_select_contains_tenant_filter() -> None:
    token = set_current_tenant_id("tenant_acme")
    try:
        repo = TenantRepository(session=Mock(), model=Role)
        stmt = repo._scoped_select()
        sql = str(stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))

        assert "WHERE" in sql
        assert "roles.tenant_id" in sql
        assert "tenant_acme" in sql
    finally:
        reset_current_tenant_id(token)


def test_subscription_select_joins_organization_for_tenant() -> None:
    repo = SubscriptionRepository(session=Mock(), tenant_id="tenant_acme")
    sql = str(repo._scoped_select().compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))

    assert "JOIN organizations" in sql
    assert "organizations.tenant_id = 'tenant_acme'" in sql


def test_unscoped_subscription_select_has_no_join() -> None:
    repo = SubscriptionRepository(session=Mock())
    sql = str(repo._scoped_select().compile(dialect=postgresql.dialect()))

    assert "JOIN" not in sql


@pytest.mark.asyncio
async def test_create_injects_tenant_id() -> None:
    token = set_current_tenant_id("tenant_acme")
    try:
        session = Mock()
        session.add = Mock()
        session.flush = AsyncMock()
        session.refresh = AsyncMock()

        repo = TenantRepository(session=session, model=Role)
        repo._apply_rls = AsyncMock()

        created = await repo.create(name="viewer", permissions=["organizations.view"], is_default=False)

        assert created.tenant_id == "tenant_acme"
        session.add.assert_called_once_with(created)
        session.flush.assert_awaited_once()
        session.refresh.assert_awaited_once_with(created)
    finally:
        reset_current_tenant_id(token)
