import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base, TimestampMixin


class ProfileRole(str, enum.Enum):
    proprietario = "proprietario"
    admin = "admin"


class SubscriptionStatus(str, enum.Enum):
    trial = "trial"
    active = "active"
    past_due = "past_due"
    canceled = "canceled"


class Profile(TimestampMixin, Base):
    """Subscriber record. ``id`` is the auth provider's subject id."""

    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    full_name: Mapped[str] = mapped_column("nome_completo", String(160), nullable=False)
    cpf: Mapped[str | None] = mapped_column(String(11))
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column("telefone", String(20))
    role: Mapped[ProfileRole] = mapped_column(
        Enum(ProfileRole), default=ProfileRole.proprietario
    )

    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        Enum(SubscriptionStatus), default=SubscriptionStatus.trial, nullable=False
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    # Last gateway payment id applied to this entitlement
    subscription_id: Mapped[str | None] = mapped_column(String(64))

    properties = relationship(
        "Property",
        back_populates="owner",
        cascade="all, delete-orphan",
    )
