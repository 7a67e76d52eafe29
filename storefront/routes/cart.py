from fastapi import APIRouter, Depends
from sqlmodel import Session
from storefront.database import get_session
from storefront.models.user import User
from storefront.schemas.cart_schemas import CartAddRequest, CartUpdateRequest, cart_to_dict
from storefront.services import cart_service
from storefront.utils.token import get_current_user

router = APIRouter()


@router.get("/")
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return cart_to_dict(cart_service.get_cart(session, current_user.id))


@router.post("/add")
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.add_to_cart(session, current_user.id, data.product_id, data.quantity)
    return {"message": "Added to cart", "cart": cart_to_dict(cart)}


@router.put("/update/{product_id}")
def update_cart_item(
    product_id: int,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.update_cart_item(session, current_user.id, product_id, data.quantity)
    return {"message": "Cart updated", "cart": cart_to_dict(cart)}


@router.delete("/remove/{product_id}")
def remove_from_cart(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.remove_from_cart(session, current_user.id, product_id)
    return {"message": "Item removed", "cart": cart_to_dict(cart)}


@router.delete("/clear")
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    cart = cart_service.clear_cart(session, current_user.id)
    return {"message": "Cart cleared", "cart": cart_to_dict(cart)}
