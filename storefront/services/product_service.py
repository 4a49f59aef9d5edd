from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import InternalError, NotFoundError, ValidationError
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import CartService
from storefront.services.media_client import MediaClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

MAX_IMAGES = 5
REQUIRED_FIELDS = ("product_name", "product_desc", "product_price", "category", "brand")
SORTS = ("lowToHigh", "highToLow")


def _parse_price(raw) -> Decimal:
    try:
        price = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ValidationError("productPrice must be a number")
    if not price.is_finite() or price < 0:
        raise ValidationError("productPrice must be zero or more")
    return price.quantize(Decimal("0.01"))


class ProductService:
    """Catalog use cases. Writes are admin-only; the routers enforce that."""

    def __init__(self, db: Session, media: MediaClient, cart_service: CartService):
        self.repo = ProductRepo(db)
        self.media = media
        self.cart_service = cart_service

    def get_all_products(self, search: str | None = None, category: str | None = None,
                         brand: str | None = None, sort: str | None = None) -> List[ProductModel]:
        if sort and sort not in SORTS:
            raise ValidationError(f"sort must be one of {', '.join(SORTS)}")
        return self.repo.list_products(search=search, category=category, brand=brand, sort=sort)

    def add_product(self, fields: Dict[str, Any], uploads: List[Dict[str, Any]]) -> ProductModel:
        if any(not fields.get(name) for name in REQUIRED_FIELDS):
            raise ValidationError("All fields are required")
        if len(uploads) > MAX_IMAGES:
            raise ValidationError(f"At most {MAX_IMAGES} images per product")

        product = ProductModel(
            product_name=fields["product_name"],
            product_desc=fields["product_desc"],
            product_price=_parse_price(fields["product_price"]),
            category=fields["category"],
            brand=fields["brand"],
            product_img=self._upload_all(uploads),
        )
        product = self.repo.save(product)

        logger.info(f"Product {product.id} '{product.product_name}' added")
        return product

    def update_product(self, product_id: int, fields: Dict[str, Any], uploads: List[Dict[str, Any]],
                       keep_images: List[str] | None = None) -> ProductModel:
        """Patch supplied fields.

        ``keep_images`` lists the public ids of current images to keep; when it
        is None every current image stays. New uploads are appended.
        """
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        current = list(product.product_img or [])
        kept = current
        if keep_images is not None:
            kept = [img for img in current if img["public_id"] in keep_images]
        dropped = [img for img in current if img not in kept]

        if len(kept) + len(uploads) > MAX_IMAGES:
            raise ValidationError(f"At most {MAX_IMAGES} images per product")
        price = None
        if fields.get("product_price") not in (None, ""):
            price = _parse_price(fields["product_price"])
        new_images = self._upload_all(uploads)

        for name in ("product_name", "product_desc", "category", "brand"):
            if fields.get(name):
                setattr(product, name, fields[name])
        if price is not None:
            # an existing cart line keeps the price it was added at
            product.product_price = price

        # reassign so the JSON column is marked dirty
        product.product_img = kept + new_images
        product = self.repo.save(product)

        # the row no longer points at them
        for img in dropped:
            self._destroy_quietly(img["public_id"])

        logger.info(f"Product {product.id} updated")
        return product

    def delete_product(self, product_id: int):
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        images = list(product.product_img or [])

        self.cart_service.purge_product(product_id)
        self.repo.delete(product)

        # hosted images go only once the row is gone
        for img in images:
            self._destroy_quietly(img["public_id"])

        logger.info(f"Product {product_id} deleted")

    def _upload_all(self, uploads: List[Dict[str, Any]]) -> List[Dict[str, str]]:
        images = []
        for upload in uploads:
            try:
                images.append(
                    self.media.upload(
                        upload["content"],
                        upload["filename"],
                        upload["content_type"],
                        folder="products",
                    )
                )
            except Exception as e:
                logger.error(f"Image upload '{upload['filename']}' failed: {e}")
                raise InternalError("Failed to upload product image")
        return images

    def _destroy_quietly(self, public_id: str):
        try:
            self.media.destroy(public_id)
        except Exception as e:
            logger.warning(f"Could not delete image {public_id}: {e}")
