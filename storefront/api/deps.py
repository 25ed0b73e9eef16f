# storefront/api/deps.py
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import Unauthenticated
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService
from storefront.services.session_service import current_user_id


def get_lock_service() -> LockService:
    return LockService()


def get_cart_service(
    db: Session = Depends(get_db),
    lock_service: LockService = Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, lock_service=lock_service)


def require_user(request: Request) -> str:
    try:
        return current_user_id(request)
    except Unauthenticated as e:
        raise HTTPException(status_code=401, detail=str(e))
