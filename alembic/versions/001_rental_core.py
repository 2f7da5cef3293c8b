"""rental core schema

Revision ID: 001_rental_core
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "001_rental_core"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Profiles
    op.create_table(
        "profiles",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("nome_completo", sa.String(length=160), nullable=False),
        sa.Column("cpf", sa.String(length=11), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("telefone", sa.String(length=20), nullable=True),
        sa.Column(
            "role",
            sa.Enum("proprietario", "admin", name="profilerole"),
            nullable=True,
        ),
        sa.Column(
            "subscription_status",
            sa.Enum("trial", "active", "past_due", "canceled", name="subscriptionstatus"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_id", sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    # Properties
    op.create_table(
        "imoveis",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("proprietario_id", sa.UUID(), nullable=False),
        sa.Column("titulo", sa.String(length=160), nullable=True),
        sa.Column("endereco_rua", sa.String(length=160), nullable=False),
        sa.Column("endereco_numero", sa.String(length=20), nullable=False),
        sa.Column("endereco_cidade", sa.String(length=120), nullable=True),
        sa.Column("valor_aluguel", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "status",
            sa.Enum("disponivel", "alugado", "manutencao", name="propertystatus"),
            nullable=True,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["proprietario_id"], ["profiles.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_imoveis_proprietario_id", "imoveis", ["proprietario_id"])

    # Tenants
    op.create_table(
        "inquilinos",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("imovel_id", sa.UUID(), nullable=False),
        sa.Column("nome_completo", sa.String(length=160), nullable=False),
        sa.Column("dia_vencimento", sa.SmallInteger(), nullable=False),
        sa.Column("valor_aluguel", sa.Numeric(10, 2), nullable=False),
        sa.Column("data_inicio", sa.Date(), nullable=True),
        sa.Column("data_fim", sa.Date(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("ativo", "inativo", name="tenantstatus"),
            nullable=False,
        ),
        *_timestamps(),
        sa.CheckConstraint(
            "dia_vencimento BETWEEN 1 AND 31", name="ck_inquilinos_dia_vencimento"
        ),
        sa.ForeignKeyConstraint(["imovel_id"], ["imoveis.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_inquilinos_imovel_id", "inquilinos", ["imovel_id"])

    # Receipts
    op.create_table(
        "comprovantes",
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("inquilino_id", sa.UUID(), nullable=False),
        sa.Column("imovel_id", sa.UUID(), nullable=False),
        sa.Column(
            "tipo",
            sa.Enum("pagamento", "residencia", name="receiptkind"),
            nullable=False,
        ),
        sa.Column("mes_referencia", sa.Date(), nullable=False),
        sa.Column("valor", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(
            ["inquilino_id"], ["inquilinos.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["imovel_id"], ["imoveis.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comprovantes_inquilino_id", "comprovantes", ["inquilino_id"])
    op.create_index("ix_comprovantes_imovel_id", "comprovantes", ["imovel_id"])
    op.create_index(
        "ix_comprovantes_mes_referencia", "comprovantes", ["mes_referencia"]
    )


def downgrade() -> None:
    op.drop_index("ix_comprovantes_mes_referencia", table_name="comprovantes")
    op.drop_index("ix_comprovantes_imovel_id", table_name="comprovantes")
    op.drop_index("ix_comprovantes_inquilino_id", table_name="comprovantes")
    op.drop_table("comprovantes")
    op.drop_index("ix_inquilinos_imovel_id", table_name="inquilinos")
    op.drop_table("inquilinos")
    op.drop_index("ix_imoveis_proprietario_id", table_name="imoveis")
    op.drop_table("imoveis")
    op.drop_table("profiles")

    sa.Enum(name="receiptkind").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="tenantstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="propertystatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="subscriptionstatus").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="profilerole").drop(op.get_bind(), checkfirst=True)
