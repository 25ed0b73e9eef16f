# storefront/data/models/product.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON, CheckConstraint

from storefront.data.database import Base


class ProductModel(Base):
    """Produkt z katalogu. Serwis koszyka tylko czyta stock, nigdy go nie zmienia."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    image_urls = Column(JSON, nullable=False, default=list)
    sizes = Column(JSON, nullable=False, default=list)  # dostepne warianty, np ["S", "M", "L"]
    category = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
