from __future__ import annotations

import hashlib
import logging
import secrets
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.core.config import settings
from saas_core.core.context import set_current_tenant_id
from saas_core.core.db import get_db_session
from saas_core.core.errors import InvalidApiKeyError, MissingAuthError
from saas_core.core.tenancy import validate_tenant_id
from saas_core.models.api_key import ApiKey
from saas_core.models.base import utcnow

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(slots=True)
class TenantContext:
    tenant_id: str


def generate_api_key() -> str:
    return f"{settings.api_key_prefix}{secrets.token_urlsafe(settings.api_key_random_bytes)}"


def hash_api_key(api_key: str) -> str:
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()


async def create_api_key(session: AsyncSession, tenant_id: str, name: str) -> tuple[str, str]:
    """Issue a key for ``tenant_id``; only its hash is stored."""
    tenant_id = validate_tenant_id(tenant_id)
    api_key = generate_api_key()
    key_hash = hash_api_key(api_key)

    session.add(ApiKey(tenant_id=tenant_id, key_hash=key_hash, name=name))
    await session.flush()
    logger.info("API key issued tenant=%s name=%s", tenant_id, name)
    return api_key, key_hash


async def validate_api_key(session: AsyncSession, api_key: str) -> TenantContext:
    if not api_key or not api_key.startswith("sk_"):
        raise InvalidApiKeyError("Invalid API key format")

    key_hash = hash_api_key(api_key)
    record = await session.scalar(select(ApiKey).where(ApiKey.key_hash == key_hash))
    if record is None:
        raise InvalidApiKeyError("API key not found")

    await session.execute(
        update(ApiKey)
        .where(ApiKey.key_hash == key_hash)
        .values(last_used_at=utcnow())
    )
    return TenantContext(tenant_id=validate_tenant_id(record.tenant_id))


async def require_tenant_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> TenantContext:
    if credentials is None:
        if request.headers.get("Authorization"):
            raise InvalidApiKeyError("Invalid Authorization header format")
        raise MissingAuthError()

    context = await validate_api_key(session, credentials.credentials)
    await session.commit()

    request.state.tenant_id = context.tenant_id
    set_current_tenant_id(context.tenant_id)
    return context
