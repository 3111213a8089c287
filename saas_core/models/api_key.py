from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from saas_core.models.base import TenantScopedBase


class ApiKey(TenantScopedBase):
    __tablename__ = "api_keys"
    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_api_keys_tenant"),
    )

    key_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
