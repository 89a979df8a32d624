"""ProductListing read model — the orchestrator's copy of the catalogue.

Fed only by stock-sync messages from the Inventory Ledger. Messages can
arrive out of order, so a listing keeps the newest ``synced_at`` and older
snapshots are discarded.
"""

from datetime import UTC

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Float, Integer, String
from protean.utils.globals import current_domain
from shared.messaging.consumer import IdempotentConsumer
from shared.messaging.messages import StockSync
from shared.messaging.streams import STOCK_SYNC

from ordering.domain import logger, ordering
from ordering.inbox import ProcessedMessage


@ordering.aggregate
class ProductListing:
    """Identified by the inventory product id."""

    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    published = Boolean(default=True)
    image_url = String(max_length=1024)
    synced_at = DateTime(required=True)


def _aware(value):
    return value if value is None or value.tzinfo else value.replace(tzinfo=UTC)


@ordering.subscriber(stream=STOCK_SYNC)
class StockSyncConsumer(IdempotentConsumer):
    message_class = StockSync
    processed_message_cls = ProcessedMessage

    def apply(self, message: StockSync) -> None:
        repo = current_domain.repository_for(ProductListing)
        try:
            listing = repo.get(message.product_id)
        except ObjectNotFoundError:
            listing = None

        if listing is not None and _aware(listing.synced_at) >= _aware(message.timestamp):
            logger.info(
                "stock_sync_stale_skipped",
                product_id=message.product_id,
                synced_at=listing.synced_at.isoformat(),
                timestamp=message.timestamp.isoformat(),
            )
            return

        if listing is None:
            listing = ProductListing(
                id=message.product_id,
                name=message.name,
                price=message.price,
                stock=message.stock,
                published=message.published,
                image_url=message.image_url,
                synced_at=message.timestamp,
            )
        else:
            listing.name = message.name
            listing.price = message.price
            listing.stock = message.stock
            listing.published = message.published
            listing.image_url = message.image_url
            listing.synced_at = message.timestamp
        repo.add(listing)

        logger.info(
            "product_listing_synced",
            product_id=message.product_id,
            stock=message.stock,
            published=message.published,
        )
