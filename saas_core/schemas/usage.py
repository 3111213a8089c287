from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

UsagePeriod = Literal["all", "month"]


class UsageRecordRequest(BaseModel):
    metric_name: str = Field(min_length=1, max_length=120)
    quantity: int = Field(ge=0)


class UsageRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    metric_name: str
    quantity: int
    timestamp: datetime


class UsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    records: list[UsageRecordResponse]


class MetricTotalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    metric_name: str
    total: int


class OrganizationUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: UUID
    total: int


class AggregatedUsageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    by_organization: list[OrganizationUsageResponse]


class UsageLimitResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    within_limit: bool
    limit: int
    usage: int
    remaining: int


class UsageResetResponse(BaseModel):
    deleted: int
