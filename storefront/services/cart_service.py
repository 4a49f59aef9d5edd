from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import NotFoundError, StaleCartError, ValidationError
from storefront.domain.schemas import ProductOut
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LockService
from storefront.utils.logging import get_logger
from storefront.utils.retry import stale_cart_retry

logger = get_logger(__name__)


class CartService:
    """
    Use cases for the per-user cart.
    commands (add, update, remove, purge) change state and recompute the total,
    query (get) only reads.
    The user id always comes from the authenticated request.
    """

    def __init__(self, db: Session, lock_service: LockService):
        self.repo = CartRepo(db)
        self.product_repo = ProductRepo(db)
        self.lock_service = lock_service

    # query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)

        if not cart:
            # no cart and an empty cart look the same to callers
            return {"id": None, "user_id": user_id, "items": [], "total_price": Decimal("0.00")}

        items = self.repo.get_cart_items(cart.id)
        total = sum((i.price * i.quantity for i in items), Decimal("0.00"))

        return {
            "id": cart.id,
            "user_id": cart.user_id,
            "items": [
                {
                    "product_id": i.product_id,
                    "quantity": i.quantity,
                    "price": i.price,
                    "product": ProductOut.model_validate(i.product) if i.product else None,
                }
                for i in items
            ],
            "total_price": total,
        }

    # commands
    @stale_cart_retry(StaleCartError)
    def add_to_cart(self, user_id: int, product_id: int) -> Dict[str, Any]:
        product = self.product_repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        with self.lock_service.cart_lock(user_id):
            try:
                cart = self.repo.get_cart_by_user(user_id)
                if not cart:
                    logger.info(f"Creating cart for user {user_id}")
                    cart = self.repo.create_cart(CartModel(user_id=user_id, total_price=Decimal("0.00"), version=1))

                existing_item = self.repo.get_cart_item(cart.id, product_id)

                if existing_item:
                    # price stays what it was when the line was created
                    logger.info(
                        f"Product {product_id} already in cart {cart.id}, quantity "
                        f"{existing_item.quantity} -> {existing_item.quantity + 1}"
                    )
                    existing_item.quantity += 1
                else:
                    logger.info(f"Adding product {product_id} to cart {cart.id}")
                    self.repo.add_cart_item(
                        CartItemModel(
                            cart_id=cart.id,
                            product_id=product_id,
                            quantity=1,
                            price=product.product_price,
                        )
                    )

                self._save(cart)
            except IntegrityError:
                # another request created the cart or the line first
                self.repo.rollback()
                raise StaleCartError("Cart was modified by another request")

        return self.get_cart(user_id)

    @stale_cart_retry(StaleCartError)
    def update_quantity(self, user_id: int, product_id: int, action: str) -> Dict[str, Any]:
        if action not in ("increase", "decrease"):
            raise ValidationError("type must be 'increase' or 'decrease'")

        with self.lock_service.cart_lock(user_id):
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise NotFoundError("Cart not found")

            item = self.repo.get_cart_item(cart.id, product_id)
            if not item:
                raise NotFoundError("Item not found")

            if action == "increase":
                item.quantity += 1
            elif item.quantity > 1:
                item.quantity -= 1
            # decrease at quantity 1 is a no-op, removal is explicit

            logger.info(f"Cart {cart.id}: product {product_id} {action} -> quantity {item.quantity}")
            self._save(cart)

        return self.get_cart(user_id)

    @stale_cart_retry(StaleCartError)
    def remove_from_cart(self, user_id: int, product_id: int) -> Dict[str, Any]:
        with self.lock_service.cart_lock(user_id):
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise NotFoundError("Cart not found")

            removed = self.repo.delete_cart_item(cart.id, product_id)
            logger.info(f"Cart {cart.id}: removed {removed} line(s) for product {product_id}")
            self._save(cart)

        return self.get_cart(user_id)

    def purge_product(self, product_id: int) -> int:
        """Drop a deleted catalog product from every cart holding it."""
        carts = self.repo.carts_with_product(product_id)
        for cart in carts:
            self._purge_from_cart(cart.user_id, product_id)
        if carts:
            logger.info(f"Product {product_id} purged from {len(carts)} cart(s)")
        return len(carts)

    @stale_cart_retry(StaleCartError)
    def _purge_from_cart(self, user_id: int, product_id: int):
        with self.lock_service.cart_lock(user_id):
            cart = self.repo.get_cart_by_user(user_id)
            if cart:
                self.repo.delete_cart_item(cart.id, product_id)
                self._save(cart)

    def _save(self, cart: CartModel):
        total = self.repo.compute_total(cart.id)
        old_version = cart.version

        # Optimistic locking: UPDATE carts SET version = v + 1 WHERE id = :id AND version = v
        rowcount = self.repo.update_cart_version(
            cart_id=cart.id,
            old_version=old_version,
            new_data={"version": old_version + 1, "total_price": total},
        )

        if rowcount == 0:
            self.repo.rollback()
            raise StaleCartError("Cart was modified by another request")

        self.repo.commit()
        logger.info(f"Cart {cart.id} saved, total {total}, version {old_version + 1}")
