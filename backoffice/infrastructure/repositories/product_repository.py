from structlog import get_logger

from backoffice.core.exceptions import ValidationError
from backoffice.domain.entities.product import Product
from backoffice.infrastructure.repositories.base import BaseSQLRepository

logger = get_logger(__name__)


class ProductRepository(BaseSQLRepository[Product]):
    model = Product

    async def increment_stock(self, product_id: str, quantity: int) -> Product:
        async with self._transaction("increment_stock", entity_id=product_id):
            product = await self._get_active_or_raise(product_id)
            product.increment_stock(quantity)
            self.db_session.add(product)
        logger.info("Stock incremented", product_id=product_id, quantity=quantity, stock=product.stock)
        return product

    async def decrement_stock(self, product_id: str, quantity: int) -> Product:
        async with self._transaction("decrement_stock", entity_id=product_id):
            product = await self._get_active_or_raise(product_id)
            product.decrement_stock(quantity)
            self.db_session.add(product)
        logger.info("Stock decremented", product_id=product_id, quantity=quantity, stock=product.stock)
        return product

    async def _get_active_or_raise(self, product_id: str) -> Product:
        product = await self._get_or_raise(product_id)
        if not product.is_active:
            raise ValidationError(
                f"Product '{product_id}' is inactive", code="inactive_product"
            )
        return product
