from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String, Text

from storefront.data.database import Base
from storefront.data.models.user import utcnow


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    product_name = Column(String(200), nullable=False)
    product_desc = Column(Text, nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False, index=True)
    brand = Column(String(100), nullable=False, index=True)

    # [{"url": ..., "public_id": ...}]
    product_img = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
