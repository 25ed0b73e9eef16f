#storefront/api/routers/cart.py
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_cart_service, require_user
from storefront.domain.errors import (
    ConflictOnWrite,
    InsufficientStock,
    InvalidInput,
    NotFound,
)
from storefront.domain.schemas import (
    CartLineOut,
    CartOut,
    CartSummaryOut,
    CleanupOut,
    RemoveIn,
    ReserveIn,
    SetQuantityIn,
    SuccessOut,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


@router.post("", response_model=CartLineOut)
def reserve(
    payload: ReserveIn,
    user_id: str = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    try:
        return svc.reserve(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
            variant=payload.sizes,
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictOnWrite as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (InsufficientStock, InvalidInput) as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=CartOut)
def list_cart(
    user_id: str = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    return svc.list_cart(user_id)


@router.get("/summary", response_model=CartSummaryOut)
def cart_summary(
    user_id: str = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.list_cart(user_id)
    return {"total": cart["total"], "count": cart["count"]}


@router.patch("", response_model=SuccessOut)
def set_quantity(
    payload: SetQuantityIn,
    user_id: str = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    # "sizes": null to podany wariant domyslny, tylko brak pola = bez zmiany rozmiaru
    variant = None
    if "sizes" in payload.model_fields_set:
        variant = payload.sizes or ""

    try:
        svc.set_quantity(
            user_id=user_id,
            product_id=payload.product_id,
            quantity=payload.quantity,
            variant=variant,
        )
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConflictOnWrite as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (InsufficientStock, InvalidInput) as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


@router.delete("", response_model=SuccessOut)
def remove(
    payload: RemoveIn | None = None,
    user_id: str = Depends(require_user),
    svc: CartService = Depends(get_cart_service),
):
    # bez product_id (albo bez body) czyscimy caly koszyk
    if payload is None or not payload.product_id:
        svc.clear_cart(user_id)
        return {"success": True}

    try:
        svc.remove(user_id, payload.product_id, payload.sizes)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True}


@router.post("/cleanup", response_model=CleanupOut)
def cleanup(svc: CartService = Depends(get_cart_service)):
    deleted = svc.purge_stale()
    return {"message": "Cart cleanup completed", "deleted_items": deleted}
