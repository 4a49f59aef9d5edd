# storefront/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(
        self,
        search: str | None = None,
        category: str | None = None,
        brand: str | None = None,
        sort: str | None = None,
    ) -> list[ProductModel]:
        stmt = select(ProductModel)
        if search:
            stmt = stmt.where(ProductModel.product_name.ilike(f"%{search}%"))
        if category:
            stmt = stmt.where(ProductModel.category == category)
        if brand:
            stmt = stmt.where(ProductModel.brand == brand)

        if sort == "lowToHigh":
            stmt = stmt.order_by(ProductModel.product_price.asc(), ProductModel.id.asc())
        elif sort == "highToLow":
            stmt = stmt.order_by(ProductModel.product_price.desc(), ProductModel.id.asc())
        else:
            stmt = stmt.order_by(ProductModel.id.desc())

        return list(self.db.execute(stmt).scalars().all())

    def save(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete(self, product: ProductModel):
        self.db.delete(product)
        self.db.commit()
