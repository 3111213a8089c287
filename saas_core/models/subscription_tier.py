from __future__ import annotations

from sqlalchemy import JSON, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from saas_core.models.base import TenantScopedBase


class SubscriptionTier(TenantScopedBase):
    __tablename__ = "subscription_tiers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_subscription_tiers_tenant_name"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    # Metric name -> cap. A metric missing here is unlimited.
    limits: Mapped[dict[str, int]] = mapped_column(JSON, nullable=False, default=dict)
