# storefront/domain/errors.py
"""
Bledy domeny koszyka.

Kazdy rodzaj bledu to osobna klasa, router mapuje je na kody HTTP.
Klasy dziedzicza tez po wbudowanych wyjatkach (ValueError, LookupError...)
tak jak reszta serwisow rzuca ValueError / PermissionError / RuntimeError.
"""


class CartError(Exception):
    """Baza dla wszystkich bledow operacji na koszyku."""


class Unauthenticated(CartError, PermissionError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class InvalidInput(CartError, ValueError):
    pass


class NotFound(CartError, LookupError):
    pass


class NotFoundProduct(NotFound):
    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class NotFoundCartLine(NotFound):
    def __init__(self, product_id: str, variant: str | None = None):
        self.product_id = product_id
        self.variant = variant
        super().__init__("Item not found in cart")


class InsufficientStock(CartError, ValueError):
    def __init__(self, available: int):
        self.available = max(0, available)
        super().__init__(f"Only {self.available} items available in stock")


class ConflictOnWrite(CartError, RuntimeError):
    def __init__(self, message: str = "Cart was modified concurrently, please retry"):
        super().__init__(message)
