import enum
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Numeric, SmallInteger, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db import Base, TimestampMixin

# ── Enums ────────────────────────────────────────────────


class PropertyStatus(str, enum.Enum):
    disponivel = "disponivel"
    alugado = "alugado"
    manutencao = "manutencao"


class TenantStatus(str, enum.Enum):
    ativo = "ativo"
    inativo = "inativo"


class ReceiptKind(str, enum.Enum):
    pagamento = "pagamento"
    residencia = "residencia"


# ── Properties ───────────────────────────────────────────


class Property(TimestampMixin, Base):
    __tablename__ = "imoveis"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        "proprietario_id",
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str | None] = mapped_column("titulo", String(160))
    street: Mapped[str] = mapped_column("endereco_rua", String(160), nullable=False)
    number: Mapped[str] = mapped_column("endereco_numero", String(20), nullable=False)
    city: Mapped[str | None] = mapped_column("endereco_cidade", String(120))
    rent_amount: Mapped[Decimal] = mapped_column(
        "valor_aluguel", Numeric(10, 2), nullable=False
    )
    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus), default=PropertyStatus.disponivel
    )

    owner = relationship("Profile", back_populates="properties")
    tenants = relationship(
        "Tenant",
        back_populates="property",
        cascade="all, delete-orphan",
    )
    receipts = relationship(
        "Receipt",
        back_populates="property",
        cascade="all, delete-orphan",
    )

    @property
    def label(self) -> str:
        return self.title or f"{self.street}, {self.number}"


# ── Tenants ──────────────────────────────────────────────


class Tenant(TimestampMixin, Base):
    __tablename__ = "inquilinos"
    __table_args__ = (
        CheckConstraint(
            "dia_vencimento BETWEEN 1 AND 31", name="ck_inquilinos_dia_vencimento"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        "imovel_id",
        UUID(as_uuid=True),
        ForeignKey("imoveis.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    full_name: Mapped[str] = mapped_column("nome_completo", String(160), nullable=False)
    due_day: Mapped[int] = mapped_column("dia_vencimento", SmallInteger, nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(
        "valor_aluguel", Numeric(10, 2), nullable=False
    )
    start_date: Mapped[date | None] = mapped_column("data_inicio", Date)
    end_date: Mapped[date | None] = mapped_column("data_fim", Date)
    status: Mapped[TenantStatus] = mapped_column(
        Enum(TenantStatus), default=TenantStatus.ativo, nullable=False
    )

    property = relationship("Property", back_populates="tenants")
    receipts = relationship(
        "Receipt",
        back_populates="tenant",
        cascade="all, delete-orphan",
    )


# ── Receipts ─────────────────────────────────────────────


class Receipt(TimestampMixin, Base):
    __tablename__ = "comprovantes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    tenant_id: Mapped[uuid.UUID] = mapped_column(
        "inquilino_id",
        UUID(as_uuid=True),
        ForeignKey("inquilinos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        "imovel_id",
        UUID(as_uuid=True),
        ForeignKey("imoveis.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    kind: Mapped[ReceiptKind] = mapped_column("tipo", Enum(ReceiptKind), nullable=False)
    reference_month: Mapped[date] = mapped_column("mes_referencia", Date, nullable=False)
    amount: Mapped[Decimal | None] = mapped_column("valor", Numeric(10, 2))

    tenant = relationship("Tenant", back_populates="receipts")
    property = relationship("Property", back_populates="receipts")
