# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class ReserveIn(BaseModel):
    """Dodanie produktu (rozmiaru) do koszyka."""

    product_id: str = Field(..., min_length=1, description="ID produktu")
    quantity: int = Field(..., ge=1, description="Ile sztuk dodac (>= 1)")
    sizes: str | None = Field(None, description="Rozmiar, brak = wariant domyslny")


class SetQuantityIn(BaseModel):
    """Ustawienie ilosci / zmiana rozmiaru linii koszyka."""

    product_id: str = Field(..., min_length=1, description="ID produktu")
    quantity: int = Field(..., ge=0, description="Nowa ilosc, 0 usuwa linie")
    sizes: str | None = Field(None, description="Docelowy rozmiar, brak pola = bez zmiany rozmiaru, null = wariant domyslny")


class RemoveIn(BaseModel):
    """Usuniecie z koszyka. Bez product_id czysci caly koszyk."""

    product_id: str | None = None
    sizes: str | None = Field(None, description="Rozmiar, brak = wszystkie rozmiary produktu")


class CartLineOut(BaseModel):
    id: int
    user_id: str
    product_id: str
    sizes: str
    quantity: int
    added_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductSummaryOut(BaseModel):
    id: str
    name: str
    price: Decimal
    image_urls: List[str]
    stock: int
    sizes: List[str]


class CartItemOut(BaseModel):
    id: int
    product_id: str
    sizes: str
    quantity: int
    added_at: datetime
    product: ProductSummaryOut


class CartOut(BaseModel):
    user_id: str
    items: List[CartItemOut]
    total: Decimal
    count: int


class CartSummaryOut(BaseModel):
    total: Decimal
    count: int


class SuccessOut(BaseModel):
    success: bool = True


class CleanupOut(BaseModel):
    message: str
    deleted_items: int


class StockOut(BaseModel):
    product_id: str
    product_name: str
    total_stock: int
    reserved_stock: int
    available_stock: int
