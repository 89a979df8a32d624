"""Product catalogue entries held by the Inventory Ledger.

The ledger is the source of truth for product price and visibility. Every
change is announced on the stock-sync stream so the orchestrator's listing
converges.
"""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String
from protean.utils.globals import current_domain

from inventory.domain import inventory
from inventory.stock.stock_sync import publish_stock_sync


@inventory.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    published = Boolean(default=True)
    image_url = String(max_length=1024)
    created_at = DateTime()
    updated_at = DateTime()


@inventory.command(part_of="Product")
class RegisterProduct:
    """Create or update a product."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    published = Boolean(default=True)
    image_url = String(max_length=1024)


@inventory.command_handler(part_of=Product)
class ProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        repo = current_domain.repository_for(Product)
        now = datetime.now(UTC)

        product = repo._dao.query.filter(id=command.product_id).all().first
        if product is None:
            product = Product(
                id=command.product_id,
                name=command.name,
                price=command.price,
                published=command.published,
                image_url=command.image_url,
                created_at=now,
                updated_at=now,
            )
        else:
            product.name = command.name
            product.price = command.price
            product.published = command.published
            product.image_url = command.image_url
            product.updated_at = now
        repo.add(product)

        publish_stock_sync(command.product_id, product=product)
        return str(product.id)
