# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, Response

from storefront.api.deps import get_cart_service, get_current_user
from storefront.data.models.user import UserModel
from storefront.domain.schemas import (
    CartEnvelope,
    CartMessageEnvelope,
    CartProductIn,
    UpdateQuantityIn,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/v1/cart", tags=["cart"])


@router.get("", response_model=CartEnvelope)
def get_cart(
    response: Response,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    # the cart changes under the same URL, never serve it from a cache
    response.headers["Cache-Control"] = "no-store"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"
    return {"success": True, "cart": svc.get_cart(user.id)}


@router.post("/add", response_model=CartMessageEnvelope)
def add_to_cart(
    payload: CartProductIn,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.add_to_cart(user_id=user.id, product_id=payload.product_id)
    return {"success": True, "message": "Product added to cart successfully", "cart": cart}


@router.put("/update", response_model=CartEnvelope)
def update_quantity(
    payload: UpdateQuantityIn,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.update_quantity(user_id=user.id, product_id=payload.product_id, action=payload.type)
    return {"success": True, "cart": cart}


@router.delete("/remove", response_model=CartEnvelope)
def remove_from_cart(
    payload: CartProductIn,
    user: UserModel = Depends(get_current_user),
    svc: CartService = Depends(get_cart_service),
):
    cart = svc.remove_from_cart(user_id=user.id, product_id=payload.product_id)
    return {"success": True, "cart": cart}
