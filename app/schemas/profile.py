from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.models.profile import ProfileRole, SubscriptionStatus


class ProfileCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    full_name: str = Field(min_length=1, max_length=160, alias="fullName")
    email: str = Field(min_length=3, max_length=255)
    cpf: str | None = Field(default=None, max_length=14)
    phone: str | None = Field(default=None, max_length=20)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    full_name: str | None = Field(default=None, max_length=160, alias="fullName")
    cpf: str | None = Field(default=None, max_length=14)
    phone: str | None = Field(default=None, max_length=20)


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True, use_enum_values=True)
    id: UUID
    full_name: str = Field(serialization_alias="fullName")
    email: str
    cpf: str | None = None
    phone: str | None = None
    role: ProfileRole
    subscription_status: SubscriptionStatus = Field(serialization_alias="subscriptionStatus")
    expires_at: datetime | None = Field(default=None, serialization_alias="expiresAt")
    created_at: datetime = Field(serialization_alias="createdAt")
