"""Seed a demo owner with properties, tenants and payment receipts."""

import argparse
import uuid
from datetime import date, timedelta
from decimal import Decimal

from dotenv import load_dotenv

from app.db import SessionLocal
from app.models.profile import Profile
from app.models.rental import (
    Property,
    PropertyStatus,
    Receipt,
    ReceiptKind,
    Tenant,
    TenantStatus,
)
from app.services.profile import ProfileService

DEMO_PROPERTIES = [
    ("Apartamento Centro", "Rua das Flores", "120", "São Paulo", Decimal("1800.00")),
    (None, "Avenida Brasil", "45", "Campinas", Decimal("1250.00")),
    ("Casa Jardim", "Rua do Sol", "9", "Santos", Decimal("2400.00")),
]

DEMO_TENANTS = [
    ("Maria Souza", 5),
    ("João Lima", 15),
    ("Ana Pereira", 28),
]


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a demo rental owner.")
    parser.add_argument("--email", default="demo@lugo.app", help="Owner email.")
    parser.add_argument(
        "--subscriber-id",
        help="Auth subject id for the owner (random when omitted).",
    )
    return parser.parse_args()


def _months_back(today: date, months: int) -> date:
    index = today.year * 12 + today.month - 1 - months
    return date(index // 12, index % 12 + 1, 1)


def main() -> None:
    load_dotenv()
    args = parse_args()
    db = SessionLocal()
    try:
        existing = db.query(Profile).filter(Profile.email == args.email).first()
        if existing:
            print(f"Demo owner already exists: {existing.id}")
            return

        owner = ProfileService(db).create_for_signup(
            args.subscriber_id or uuid.uuid4(),
            full_name="Proprietário Demo",
            email=args.email,
            cpf="52998224725",
            phone="11999990000",
        )

        today = date.today()
        for (title, street, number, city, rent), (tenant_name, due_day) in zip(
            DEMO_PROPERTIES, DEMO_TENANTS
        ):
            prop = Property(
                owner_id=owner.id,
                title=title,
                street=street,
                number=number,
                city=city,
                rent_amount=rent,
                status=PropertyStatus.alugado,
            )
            tenant = Tenant(
                property=prop,
                full_name=tenant_name,
                due_day=due_day,
                rent_amount=rent,
                start_date=today - timedelta(days=200),
                status=TenantStatus.ativo,
            )
            db.add_all([prop, tenant])
            # Paid for each of the previous five months, not the current one
            for months in range(1, 6):
                db.add(
                    Receipt(
                        tenant=tenant,
                        property=prop,
                        kind=ReceiptKind.pagamento,
                        reference_month=_months_back(today, months),
                        amount=rent,
                    )
                )
        db.commit()
        print(f"Demo owner seeded: {owner.id} ({owner.email})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
