"""Stock-sync notifications — the latest catalogue and stock state of a product."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from shared.messaging.messages import StockSync, utcnow
from shared.messaging.streams import STOCK_SYNC

from inventory.domain import logger
from inventory.stock.stock import Inventory


def total_stock(product_id) -> int:
    rows = (
        current_domain.repository_for(Inventory)
        ._dao.query.filter(product_id=str(product_id))
        .limit(None)
        .all()
        .items
    )
    return sum(row.quantity for row in rows)


def build_stock_sync(product_id, product=None) -> StockSync | None:
    from inventory.stock.product import Product

    if product is None:
        try:
            product = current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            return None

    return StockSync(
        product_id=str(product_id),
        name=product.name,
        price=product.price,
        stock=total_stock(product_id),
        published=product.published,
        image_url=product.image_url,
        timestamp=utcnow(),
    )


def publish_stock_sync(product_id, product=None) -> None:
    """Publish the product's state. Inside a Unit of Work this waits for commit."""
    message = build_stock_sync(product_id, product=product)
    if message is None:
        logger.warning("stock_sync_skipped_unknown_product", product_id=str(product_id))
        return

    current_domain.brokers["default"].publish(STOCK_SYNC, message.to_payload())
