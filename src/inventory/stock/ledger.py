"""Inventory Ledger — CheckStock, Reserve, Commit and Rollback.

Protocol (two-phase intent):

    Reserve   debit the warehouse row and record a RESERVED hold, in one
              Unit of Work. Fails with InsufficientStockError, debiting nothing.
    Commit    mark the hold COMMITTED. No quantity change; the debit already
              happened. Missing or already-committed holds are a no-op.
    Rollback  for every hold of the order, credit its quantity back and
              delete it, one Unit of Work per hold. No holds is success.

Quantities change only through ``compare_and_swap`` on the Inventory row's
revision. Each attempt opens a fresh Unit of Work so a retry re-reads
committed state; attempts are bounded and exhaust into ConcurrencyConflict.
"""

from datetime import UTC, datetime

from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain
from shared.concurrency import retry_on_conflict, swap_or_raise
from shared.errors import InsufficientStockError

from inventory.domain import inventory, logger
from inventory.stock.stock import Inventory, Reservation, inventory_id_for
from inventory.stock.stock_sync import publish_stock_sync
from inventory.warehouse.warehouse import Warehouse


def reservations_for(order_id) -> list:
    return (
        current_domain.repository_for(Reservation)
        ._dao.query.filter(order_id=str(order_id))
        .limit(None)
        .all()
        .items
    )


def release_reservation(reservation_id) -> Reservation | None:
    """Credit one hold back and delete it. Must run inside a Unit of Work.

    Returns the released hold, or None when it is already gone. Raises
    ``RevisionMismatch`` when the Inventory row moved underneath us.
    """
    reservation_repo = current_domain.repository_for(Reservation)
    try:
        reservation = reservation_repo.get(reservation_id)
    except ObjectNotFoundError:
        return None

    inventory_repo = current_domain.repository_for(Inventory)
    row = inventory_repo.get(reservation.inventory_id)
    swap_or_raise(
        inventory_repo,
        row.id,
        row.revision,
        quantity=row.quantity + reservation.quantity,
        updated_at=datetime.now(UTC),
    )
    reservation_repo._dao.delete(reservation)

    logger.info(
        "reservation_released",
        order_id=reservation.order_id,
        reservation_id=str(reservation.id),
        warehouse_id=reservation.warehouse_id,
        product_id=reservation.product_id,
        quantity=reservation.quantity,
    )
    return reservation


@inventory.application_service(part_of=Inventory)
class InventoryLedger:
    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def check_stock(self, product_id, quantity) -> bool:
        """True if some active warehouse alone holds at least ``quantity``."""
        return bool(self.find_warehouses(product_id, quantity))

    def find_warehouses(self, product_id, quantity) -> list[str]:
        """Active warehouses able to cover ``quantity``, fullest first."""
        rows = (
            current_domain.repository_for(Inventory)
            ._dao.query.filter(product_id=str(product_id), quantity__gte=quantity)
            .order_by("-quantity")
            .limit(None)
            .all()
            .items
        )
        warehouse_repo = current_domain.repository_for(Warehouse)
        candidates = []
        for row in rows:
            try:
                warehouse = warehouse_repo.get(row.warehouse_id)
            except ObjectNotFoundError:
                continue
            if warehouse.is_active:
                candidates.append(row.warehouse_id)
        return candidates

    # -------------------------------------------------------------------
    # Reserve
    # -------------------------------------------------------------------
    def reserve(self, order_id, warehouse_id, product_id, quantity) -> str:
        """Debit ``quantity`` at one warehouse and record the hold.

        A second call for the same order and product returns the existing
        hold instead of debiting again.
        """
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        existing = [r for r in reservations_for(order_id) if r.product_id == str(product_id)]
        if existing:
            logger.info(
                "reservation_already_held",
                order_id=str(order_id),
                reservation_id=str(existing[0].id),
            )
            return str(existing[0].id)

        warehouse = current_domain.repository_for(Warehouse).get(str(warehouse_id))
        if not warehouse.is_active:
            raise ValidationError({"warehouse_id": ["Warehouse is inactive"]})

        def attempt() -> str:
            with UnitOfWork():
                inventory_repo = current_domain.repository_for(Inventory)
                try:
                    row = inventory_repo.get(inventory_id_for(warehouse_id, product_id))
                except ObjectNotFoundError:
                    row = None

                available = row.quantity if row else 0
                if available < quantity:
                    raise InsufficientStockError(
                        f"Warehouse {warehouse_id} holds {available} of product "
                        f"{product_id}, {quantity} requested",
                        warehouse_id=str(warehouse_id),
                        product_id=str(product_id),
                        available=available,
                        requested=quantity,
                    )

                swap_or_raise(
                    inventory_repo,
                    row.id,
                    row.revision,
                    quantity=row.quantity - quantity,
                    updated_at=datetime.now(UTC),
                )
                reservation = Reservation.hold(order_id, warehouse_id, product_id, quantity)
                current_domain.repository_for(Reservation).add(reservation)
                return str(reservation.id)

        reservation_id = retry_on_conflict(attempt, operation="inventory.reserve")
        logger.info(
            "stock_reserved",
            order_id=str(order_id),
            reservation_id=reservation_id,
            warehouse_id=str(warehouse_id),
            product_id=str(product_id),
            quantity=quantity,
        )
        return reservation_id

    # -------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------
    def commit(self, reservation_id) -> bool:
        """Finalize a hold. Returns False for the no-op cases."""
        with UnitOfWork():
            repo = current_domain.repository_for(Reservation)
            try:
                reservation = repo.get(str(reservation_id))
            except ObjectNotFoundError:
                logger.info("commit_skipped_missing_reservation", reservation_id=str(reservation_id))
                return False

            if not reservation.commit():
                logger.info("commit_skipped_already_committed", reservation_id=str(reservation_id))
                return False
            repo.add(reservation)

        logger.info("reservation_committed", reservation_id=str(reservation_id))
        return True

    # -------------------------------------------------------------------
    # Rollback
    # -------------------------------------------------------------------
    def rollback(self, order_id) -> int:
        """Release every hold of the order. Safe to call any number of times.

        Returns how many holds this call released.
        """
        reservations = reservations_for(order_id)
        if not reservations:
            logger.info("rollback_noop", order_id=str(order_id))
            return 0

        released_count = 0
        released_products = set()
        for reservation in reservations:

            def attempt(reservation_id=str(reservation.id)):
                with UnitOfWork():
                    return release_reservation(reservation_id)

            released = retry_on_conflict(attempt, operation="inventory.rollback")
            if released is not None:
                released_count += 1
                released_products.add(released.product_id)

        for product_id in sorted(released_products):
            publish_stock_sync(product_id)

        return released_count

    # -------------------------------------------------------------------
    # Restocking
    # -------------------------------------------------------------------
    def receive_stock(self, warehouse_id, product_id, quantity) -> int:
        """Credit stock at a warehouse, opening the row on first receipt."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        current_domain.repository_for(Warehouse).get(str(warehouse_id))

        def attempt() -> int:
            with UnitOfWork():
                inventory_repo = current_domain.repository_for(Inventory)
                try:
                    row = inventory_repo.get(inventory_id_for(warehouse_id, product_id))
                except ObjectNotFoundError:
                    inventory_repo.add(Inventory.open(warehouse_id, product_id, quantity))
                    return quantity

                new_quantity = row.quantity + quantity
                swap_or_raise(
                    inventory_repo,
                    row.id,
                    row.revision,
                    quantity=new_quantity,
                    updated_at=datetime.now(UTC),
                )
                return new_quantity

        new_quantity = retry_on_conflict(attempt, operation="inventory.receive")
        logger.info(
            "stock_received",
            warehouse_id=str(warehouse_id),
            product_id=str(product_id),
            quantity=quantity,
            on_hand=new_quantity,
        )
        publish_stock_sync(product_id)
        return new_quantity
