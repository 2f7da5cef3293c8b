"""Check that the configured Asaas credentials reach the API."""

import argparse
import sys

from dotenv import load_dotenv

from app.errors import AppError
from app.services.asaas import AsaasGateway


def parse_args():
    parser = argparse.ArgumentParser(description="Check Asaas API connectivity.")
    parser.add_argument(
        "--cpf",
        help="Look up the customer registered for this CPF/CNPJ.",
    )
    return parser.parse_args()


def main() -> int:
    load_dotenv()
    args = parse_args()
    gateway = AsaasGateway()
    if not gateway.is_configured():
        print("ASAAS_API_KEY is not set.")
        return 1
    if not gateway.is_webhook_configured():
        print("Warning: ASAAS_WEBHOOK_TOKEN is not set, webhooks will be rejected.")

    try:
        if args.cpf:
            result = gateway.request("/customers", params={"cpfCnpj": args.cpf})
            customers = result.get("data") or []
            if customers:
                print(f"Customer found: {customers[0].get('id')} ({customers[0].get('name')})")
            else:
                print("No customer registered for this CPF/CNPJ.")
        else:
            result = gateway.request("/customers", params={"limit": 1})
            print(f"Asaas reachable, {result.get('totalCount', 0)} customers registered.")
    except AppError as exc:
        print(f"Asaas check failed: {exc.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
