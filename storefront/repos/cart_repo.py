# storefront/repos/cart_repo.py
from datetime import datetime

from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.cart_line import CartLineModel


class CartRepo:
    """
    Dostep do tabeli cart_lines.
    Nie commituje sam (poza tym co wola serwis), transakcja jest po stronie serwisu.
    """

    def __init__(self, db: Session):
        self.db = db

    # odczyt
    def get_line(self, user_id: str, product_id: str, variant: str) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
                CartLineModel.size_variant == variant,
            )
        ).scalar_one_or_none()

    def get_any_line(self, user_id: str, product_id: str) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel)
            .where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            )
            .order_by(CartLineModel.id)
            .limit(1)
        ).scalar_one_or_none()

    def get_lines(self, user_id: str) -> list[CartLineModel]:
        return list(
            self.db.execute(
                select(CartLineModel)
                .options(joinedload(CartLineModel.product))
                .where(CartLineModel.user_id == user_id)
                .order_by(CartLineModel.added_at, CartLineModel.id)
            ).scalars().all()
        )

    def reserved_quantity(self, product_id: str, cutoff: datetime) -> int:
        #suma po wszystkich userach i rozmiarach, bez przeterminowanych
        total = self.db.execute(
            select(func.coalesce(func.sum(CartLineModel.quantity), 0)).where(
                CartLineModel.product_id == product_id,
                CartLineModel.added_at >= cutoff,
            )
        ).scalar_one()
        return int(total)

    # zapis
    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def delete_line(self, line: CartLineModel) -> None:
        self.db.delete(line)
        self.db.flush()

    def delete_line_by_key(self, user_id: str, product_id: str, variant: str) -> bool:
        result = self.db.execute(
            delete(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
                CartLineModel.size_variant == variant,
            ).execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    def delete_lines_for_product(self, user_id: str, product_id: str) -> int:
        result = self.db.execute(
            delete(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            ).execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def delete_lines_for_user(self, user_id: str) -> int:
        result = self.db.execute(
            delete(CartLineModel)
            .where(CartLineModel.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def purge_stale(self, cutoff: datetime) -> int:
        result = self.db.execute(
            delete(CartLineModel)
            .where(CartLineModel.added_at < cutoff)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    def flush(self):
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
