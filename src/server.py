"""Protean Engine runner for the fulfillment domains.

Starts Engine workers that consume the broker streams (Redis in production):
- inventory:      inventory.rollback.request
- payments:       payment.refund.request
- ordering:       inventory.stock.sync
- notifications:  email.<TYPE>

The delivery carrier simulator can run alongside the Engines.

Usage:
    python src/server.py                         # Run every consuming domain
    python src/server.py --domain payments       # Run only the payments engine
    python src/server.py --simulate              # Also tick the delivery simulator
"""

import argparse
import asyncio

import structlog
from protean.server.engine import Engine

from shared.logging import configure_logging

logger = structlog.get_logger(__name__)

CONSUMING_DOMAINS = ["inventory", "payments", "ordering", "notifications"]


def _get_domain(name):
    """Import and initialize a domain by name."""
    if name == "inventory":
        from inventory.domain import inventory

        inventory.init()
        return inventory
    elif name == "payments":
        from payments.domain import payments

        payments.init()
        return payments
    elif name == "ordering":
        from ordering.domain import ordering

        ordering.init()
        return ordering
    elif name == "notifications":
        from notifications.domain import notifications

        notifications.init()
        return notifications
    elif name == "delivery":
        from delivery.domain import delivery

        delivery.init()
        return delivery
    else:
        raise ValueError(f"Unknown domain: {name}")


async def simulate_deliveries(delivery) -> None:
    """Tick the carrier simulator forever at the configured interval."""
    from delivery.shipment.simulator import DeliverySimulator

    with delivery.domain_context():
        interval = float(delivery.config.get("custom", {}).get("simulation_interval_seconds", 5.0))

    while True:
        with delivery.domain_context():
            changes = await asyncio.to_thread(DeliverySimulator().tick)
        if changes:
            logger.info("delivery_simulation_tick", changes=len(changes))
        await asyncio.sleep(interval)


async def run(domain_names, simulate=False):
    engines = []
    for name in domain_names:
        domain = _get_domain(name)
        engines.append(Engine(domain))

    tasks = [engine.run() for engine in engines]
    if simulate:
        tasks.append(simulate_deliveries(_get_domain("delivery")))

    await asyncio.gather(*tasks)


def main():
    parser = argparse.ArgumentParser(description="Fulfillment Engine runner")
    parser.add_argument(
        "--domain",
        choices=CONSUMING_DOMAINS,
        help="Run a single domain engine (default: run all)",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Advance active shipments through the carrier simulator",
    )
    args = parser.parse_args()

    configure_logging()
    domain_names = [args.domain] if args.domain else CONSUMING_DOMAINS

    asyncio.run(run(domain_names, simulate=args.simulate))


if __name__ == "__main__":
    main()
