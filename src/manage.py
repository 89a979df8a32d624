"""Fulfillment database management CLI.

Provides commands to create and drop database schemas for all domains, and
to seed a demo catalogue: two warehouses, product 42 at $50.00, stock, the
merchant account behind the biller code and a funded customer account.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Load demo data
"""

import argparse
import sys

from shared.db import drop_db, setup_db

DOMAIN_NAMES = ["inventory", "payments", "delivery", "webhooks", "ordering", "notifications"]

DEMO_PRODUCT_ID = "42"
DEMO_CUSTOMER_ACCOUNT_ID = "acct-customer-1"
DEMO_MERCHANT_ACCOUNT_ID = "acct-merchant"


def _domains():
    from delivery.domain import delivery
    from inventory.domain import inventory
    from notifications.domain import notifications
    from ordering.domain import ordering
    from payments.domain import payments
    from webhooks.domain import webhooks

    return {
        "inventory": inventory,
        "payments": payments,
        "delivery": delivery,
        "webhooks": webhooks,
        "ordering": ordering,
        "notifications": notifications,
    }


def setup_databases(domains=None):
    """Create database schemas for the specified (or all) domains."""
    all_domains = _domains()
    targets = {d: all_domains[d] for d in domains} if domains else all_domains

    for name, domain in targets.items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Creating {name} database schema...")
        setup_db(domain)
        print(f"  {name} schema ready.")

    print("Done.")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    all_domains = _domains()
    targets = {d: all_domains[d] for d in domains} if domains else all_domains

    for name, domain in targets.items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Dropping {name} database schema...")
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def seed():
    """Load the demo catalogue, stock and accounts."""
    from inventory.stock.ledger import InventoryLedger
    from inventory.stock.product import RegisterProduct
    from inventory.stock.stock_sync import build_stock_sync
    from inventory.warehouse.management import CreateWarehouse
    from ordering.listing.listing import StockSyncConsumer
    from payments.account.transfers import AccountLedger

    domains = _domains()
    for domain in domains.values():
        domain.init()

    inventory, payments, ordering = domains["inventory"], domains["payments"], domains["ordering"]

    with inventory.domain_context():
        for warehouse_id, name, city in (("wh-east", "East Coast DC", "Newark"), ("wh-west", "West Coast DC", "Reno")):
            inventory.process(
                CreateWarehouse(
                    warehouse_id=warehouse_id,
                    name=name,
                    address={"street": "1 Dock Rd", "city": city, "postal_code": "00000", "country": "US"},
                ),
                asynchronous=False,
            )
        inventory.process(
            RegisterProduct(product_id=DEMO_PRODUCT_ID, name="Trail Running Shoe", price=50.0, published=True),
            asynchronous=False,
        )
        ledger = InventoryLedger()
        ledger.receive_stock("wh-east", DEMO_PRODUCT_ID, 10)
        ledger.receive_stock("wh-west", DEMO_PRODUCT_ID, 5)
        listing = build_stock_sync(DEMO_PRODUCT_ID)
    print(f"Seeded product {DEMO_PRODUCT_ID} with {listing.stock} units across 2 warehouses.")

    # The listing normally arrives over the broker; seed it directly
    with ordering.domain_context():
        StockSyncConsumer()(listing.to_payload())

    with payments.domain_context():
        biller_code = str(payments.config.get("custom", {}).get("biller_code", "93242"))
        accounts = AccountLedger()
        accounts.open_merchant_account("Fulfillment Store", biller_code, account_id=DEMO_MERCHANT_ACCOUNT_ID)
        accounts.open_account("Demo Customer", opening_balance=500.0, account_id=DEMO_CUSTOMER_ACCOUNT_ID)
    print(f"Seeded merchant account (biller {biller_code}) and customer account {DEMO_CUSTOMER_ACCOUNT_ID}.")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Fulfillment database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    subparsers.add_parser("seed", help="Load demo warehouses, stock and accounts")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    elif args.command == "seed":
        seed()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
