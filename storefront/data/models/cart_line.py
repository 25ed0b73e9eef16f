# storefront/data/models/cart_line.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart_lines"
    __table_args__ = (
        # jeden wiersz na (user, produkt, rozmiar)
        UniqueConstraint("user_id", "product_id", "size_variant", name="u_cart_user_product_size"),
        CheckConstraint("quantity > 0", name="ck_cart_lines_quantity_positive"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    # "" = brak rozmiaru / wariant domyslny
    size_variant = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False)
    added_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    product = relationship("ProductModel")
