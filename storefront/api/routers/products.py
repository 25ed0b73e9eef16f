# storefront/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_cart_service
from storefront.domain.errors import NotFound
from storefront.domain.schemas import StockOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("/stock/{product_id}", response_model=StockOut)
def product_stock(product_id: str, svc: CartService = Depends(get_cart_service)):
    """
    Stan produktu z uwzglednieniem rezerwacji w koszykach.
    """
    try:
        return svc.stock_info(product_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
