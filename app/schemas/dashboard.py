from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.billing import EntitlementRead


class DashboardAlert(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
    id: str
    tenant_id: UUID = Field(serialization_alias="tenantId")
    tenant_name: str = Field(serialization_alias="tenantName")
    property_name: str = Field(serialization_alias="propertyName")
    due_date: int = Field(ge=1, le=31, serialization_alias="dueDate")
    type: Literal["overdue", "upcoming"]
    amount: Decimal


class DashboardStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
    total_properties: int = Field(serialization_alias="totalProperties")
    active_tenants: int = Field(serialization_alias="activeTenants")
    receipts_generated: int = Field(serialization_alias="receiptsGenerated")


class RevenuePointRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    month: str
    total: Decimal


class DashboardRead(BaseModel):
    stats: DashboardStatsRead
    revenue: list[RevenuePointRead]
    alerts: list[DashboardAlert]
    entitlement: EntitlementRead
