from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Dict, Any
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    CartError,
    ConflictOnWrite,
    InsufficientStock,
    InvalidInput,
    NotFoundCartLine,
    NotFoundProduct,
)
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LockService
from storefront.utils.retry import conflict_retry
from storefront.utils.settings import CART_TTL_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Rezerwacje w koszyku per (user, produkt, rozmiar).

    commands (reserve, set_quantity, remove, clear_cart, purge_stale) modyfikuja stan
    query (list_cart, cart_total, cart_count, stock_info) tylko odczyt

    Ilosc w koszyku to miekka rezerwacja na stanie produktu, stock produktu
    nigdy nie jest tu zmieniany. Linie starsze niz CART_TTL_SECONDS sa
    usuwane przed kazdym odczytem i nie licza sie do zarezerwowanej puli.

    Argument `variant`: None = nie podano, "" = wariant domyslny (bez rozmiaru).
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        ttl_seconds: int = CART_TTL_SECONDS,
    ):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service
        self.ttl_seconds = ttl_seconds

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _cutoff(self, now: datetime | None = None) -> datetime:
        return (now or self._now()) - timedelta(seconds=self.ttl_seconds)

    def _get_product(self, product_id: str) -> ProductModel:
        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundProduct(product_id)
        return product

    @staticmethod
    def _line_dict(line: CartLineModel) -> Dict[str, Any]:
        return {
            "id": line.id,
            "user_id": line.user_id,
            "product_id": line.product_id,
            "sizes": line.size_variant,
            "quantity": line.quantity,
            "added_at": line.added_at,
        }

    @staticmethod
    def _product_dict(product: ProductModel) -> Dict[str, Any]:
        return {
            "id": product.id,
            "name": product.name,
            "price": product.price,
            "image_urls": list(product.image_urls or []),
            "stock": product.stock,
            "sizes": list(product.sizes or []),
        }

    #query - odczyt
    def list_cart(self, user_id: str) -> Dict[str, Any]:
        self.purge_stale()

        lines = self.repo.get_lines(user_id)
        items = []
        for line in lines:
            item = self._line_dict(line)
            item["product"] = self._product_dict(line.product)
            items.append(item)

        total = sum((line.product.price * line.quantity for line in lines), Decimal("0.00"))
        count = sum(line.quantity for line in lines)

        return {
            "user_id": user_id,
            "items": items,
            "total": total,
            "count": count,
        }

    def cart_total(self, user_id: str) -> Decimal:
        return self.list_cart(user_id)["total"]

    def cart_count(self, user_id: str) -> int:
        return self.list_cart(user_id)["count"]

    def stock_info(self, product_id: str) -> Dict[str, Any]:
        product = self._get_product(product_id)
        reserved = self.repo.reserved_quantity(product_id, self._cutoff())

        return {
            "product_id": product.id,
            "product_name": product.name,
            "total_stock": product.stock,
            "reserved_stock": reserved,
            "available_stock": max(0, product.stock - reserved),
        }

    #commands
    def purge_stale(self) -> int:
        purged = self.repo.purge_stale(self._cutoff())
        self.repo.commit()
        if purged:
            logger.info(f"Usunieto {purged} przeterminowanych linii koszyka")
        return purged

    @conflict_retry()
    def reserve(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        variant: str | None = None,
    ) -> Dict[str, Any]:

        if not product_id or quantity is None or quantity < 1:
            raise InvalidInput("Product ID and valid quantity are required")

        size = variant or ""
        product = self._get_product(product_id)
        self.purge_stale()

        # lock na produkt zeby dwie rezerwacje nie liczyly dostepnosci z tego samego snapshotu
        with self.lock_service.product_lock(product_id):
            try:
                now = self._now()
                reserved = self.repo.reserved_quantity(product_id, self._cutoff(now))
                available = product.stock - reserved
                logger.info(
                    f"Stan produktu {product_id}: stock={product.stock}, "
                    f"reserved={reserved}, available={available}"
                )

                if available < quantity:
                    raise InsufficientStock(available)

                line = self.repo.get_line(user_id, product_id, size)

                if line:
                    new_quantity = line.quantity + quantity
                    # drugi check na wlasna sume usera, nie na cala pule
                    if product.stock < new_quantity:
                        raise InsufficientStock(product.stock - line.quantity)

                    logger.info(
                        f"Produkt {product_id} [{size!r}] juz jest w koszyku {user_id}, "
                        f"zwiekszam ilosc z {line.quantity} do {new_quantity}"
                    )
                    line.quantity = new_quantity
                    line.added_at = now
                    self.repo.flush()
                else:
                    logger.info(f"Dodaje produkt {product_id} [{size!r}] x{quantity} do koszyka {user_id}")
                    line = self.repo.add_line(
                        CartLineModel(
                            user_id=user_id,
                            product_id=product_id,
                            size_variant=size,
                            quantity=quantity,
                            added_at=now,
                        )
                    )

                self.repo.commit()

            except IntegrityError as e:
                self.repo.rollback()
                logger.warning(f"Konflikt zapisu przy rezerwacji {product_id} dla {user_id}: {e.orig}")
                raise ConflictOnWrite() from e
            except CartError as e:
                self.repo.rollback()
                logger.warning(f"Rezerwacja {product_id} dla {user_id} odrzucona: {e}")
                raise

        return self._line_dict(line)

    @conflict_retry()
    def set_quantity(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        variant: str | None = None,
    ) -> None:
        """
        Ustawia ilosc bezwzglednie, obsluguje tez zmiane rozmiaru.

        1. linia do zmiany: najpierw dokladnie (user, produkt, variant),
           potem dowolna linia tego produktu u usera
        2. quantity == 0 -> usuwa linie o kluczu z podanym wariantem
        3. quantity > 0 -> ten sam wariant: update w miejscu,
           inny wariant: przeniesienie rezerwacji (_switch_variant)
        """
        if not product_id or quantity is None:
            raise InvalidInput("Product ID and quantity are required")
        if quantity < 0:
            raise InvalidInput("Quantity must be non-negative")

        product = self._get_product(product_id)
        target = variant or ""
        self.purge_stale()

        line = None
        if variant is not None:
            line = self.repo.get_line(user_id, product_id, target)
        if not line:
            line = self.repo.get_any_line(user_id, product_id)
        if not line:
            raise NotFoundCartLine(product_id, variant)

        try:
            if quantity == 0:
                # zawsze klucz z podanym wariantem, brak wiersza to no-op
                deleted = self.repo.delete_line_by_key(user_id, product_id, target)
                logger.info(
                    f"Usuwanie {product_id} [{target!r}] z koszyka {user_id} "
                    f"({'usunieto' if deleted else 'brak wiersza'})"
                )
            else:
                if quantity > product.stock:
                    raise InsufficientStock(product.stock)

                now = self._now()
                if variant is None or line.size_variant == target:
                    logger.info(
                        f"Zmiana ilosci {product_id} [{line.size_variant!r}] "
                        f"w koszyku {user_id}: {line.quantity} -> {quantity}"
                    )
                    line.quantity = quantity
                    line.added_at = now
                    self.repo.flush()
                else:
                    self._switch_variant(line, target, quantity, now)

            self.repo.commit()

        except IntegrityError as e:
            self.repo.rollback()
            logger.warning(f"Konflikt zapisu przy zmianie {product_id} dla {user_id}: {e.orig}")
            raise ConflictOnWrite() from e
        except CartError as e:
            self.repo.rollback()
            logger.warning(f"Zmiana ilosci {product_id} dla {user_id} odrzucona: {e}")
            raise

    def _switch_variant(
        self,
        line: CartLineModel,
        target: str,
        quantity: int,
        now: datetime,
    ) -> None:
        existing_target = self.repo.get_line(line.user_id, line.product_id, target)

        if existing_target:
            # nadpisanie docelowej linii, ilosc starej linii przepada (nie sumujemy)
            logger.info(
                f"Zmiana rozmiaru {line.product_id} {line.size_variant!r} -> {target!r} "
                f"dla {line.user_id}: nadpisuje istniejaca linie ({existing_target.quantity} -> {quantity})"
            )
            existing_target.quantity = quantity
            existing_target.added_at = now
            self.repo.delete_line(line)
        else:
            # przeklucz w miejscu, nigdy dwa wiersze z tym samym kluczem
            logger.info(
                f"Zmiana rozmiaru {line.product_id} {line.size_variant!r} -> {target!r} "
                f"dla {line.user_id}, ilosc {quantity}"
            )
            line.size_variant = target
            line.quantity = quantity
            line.added_at = now
            self.repo.flush()

    def remove(self, user_id: str, product_id: str, variant: str | None = None) -> int:
        if not product_id:
            raise InvalidInput("Product ID is required")

        # przeterminowana linia nie istnieje, tez dla usuwania
        self.purge_stale()

        if variant is not None:
            if not self.repo.delete_line_by_key(user_id, product_id, variant):
                self.repo.rollback()
                raise NotFoundCartLine(product_id, variant)
            removed = 1
        else:
            # brak wariantu -> wszystkie rozmiary tego produktu
            removed = self.repo.delete_lines_for_product(user_id, product_id)

        self.repo.commit()
        logger.info(f"Usunieto {removed} linii produktu {product_id} z koszyka {user_id}")
        return removed

    def clear_cart(self, user_id: str) -> int:
        removed = self.repo.delete_lines_for_user(user_id)
        self.repo.commit()
        logger.info(f"Wyczyszczono koszyk {user_id}, usunieto {removed} linii")
        return removed
