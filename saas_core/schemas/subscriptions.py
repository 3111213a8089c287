from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt


class TierDefineRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    features: list[str] = Field(default_factory=list)
    limits: dict[str, NonNegativeInt] = Field(default_factory=dict)


class TierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    features: list[str]
    limits: dict[str, int]


class SubscribeRequest(BaseModel):
    tier_id: UUID
    expiration_date: datetime | None = None


class SubscriptionUpdateRequest(BaseModel):
    tier_id: UUID


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    tier_id: UUID
    status: str
    start_date: datetime
    expiration_date: datetime | None
    features: list[str]
    limits: dict[str, int]


class FeatureAccessResponse(BaseModel):
    feature: str
    allowed: bool
