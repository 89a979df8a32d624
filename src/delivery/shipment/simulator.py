"""Carrier simulator.

Each tick walks the active shipments, oldest first:

- SHIPMENT_CREATED moves to PROCESSING.
- PROCESSING is picked up (progress = one step) or, at the loss rate, LOST.
- PICKED_UP moves to IN_TRANSIT, gaining one step of progress.
- IN_TRANSIT gains one step per tick and is DELIVERED once progress hits 100.
"""

import random

from protean.utils.globals import current_domain

from delivery.domain import logger
from delivery.shipment.dispatcher import DeliveryDispatcher, active_shipments
from delivery.shipment.shipment import ShipmentStatus


def simulation_settings() -> tuple[float, int]:
    custom = current_domain.config.get("custom", {})
    return (
        float(custom.get("simulation_loss_rate", 0.05)),
        int(custom.get("simulation_progress_step", 20)),
    )


class DeliverySimulator:
    def __init__(self, rng: random.Random | None = None, loss_rate: float | None = None, step: int | None = None):
        configured_loss_rate, configured_step = simulation_settings()
        self.rng = rng or random.Random()
        self.loss_rate = configured_loss_rate if loss_rate is None else loss_rate
        self.step = configured_step if step is None else step
        self.dispatcher = DeliveryDispatcher()

    def tick(self) -> list[tuple[str, str]]:
        """Advance every active shipment once. Returns ``(shipment_id, status)`` per change."""
        changes = []
        for shipment in active_shipments():
            status = ShipmentStatus(shipment.status)
            shipment_id = str(shipment.id)

            if status is ShipmentStatus.PROCESSING and self.rng.random() < self.loss_rate:
                updated = self.dispatcher.report_lost(shipment_id)
            elif status is ShipmentStatus.IN_TRANSIT:
                progress = shipment.progress + self.step
                if progress < 100:
                    self.dispatcher.record_progress(shipment_id, progress)
                    continue
                updated = self.dispatcher.advance_shipment(shipment_id)
            elif status is ShipmentStatus.SHIPMENT_CREATED:
                updated = self.dispatcher.advance_shipment(shipment_id)
            else:
                updated = self.dispatcher.advance_shipment(shipment_id, progress=shipment.progress + self.step)

            changes.append((shipment_id, updated.status))

        if changes:
            logger.info("simulation_tick", changed=len(changes))
        return changes
