import logging

from sqlmodel import Session, select

from storefront.errors import CartItemNotFound, InsufficientStock, InvalidQuantity, ProductNotFound
from storefront.models.base import utcnow
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product
from storefront.services.pricing import to_money

logger = logging.getLogger(__name__)


def _find_cart(session: Session, user_id: int):
    return session.exec(select(Cart).where(Cart.user_id == user_id)).first()


def _recalculate(cart: Cart):
    cart.total_amount = to_money(sum((i.price * i.quantity for i in cart.items), 0))
    cart.updated_at = utcnow()


def _find_item(cart: Cart, product_id: int):
    return next((i for i in cart.items if i.product_id == product_id), None)


def get_cart(session: Session, user_id: int) -> Cart:
    """Return the user's cart, creating an empty one on first access."""
    cart = _find_cart(session, user_id)
    if cart is None:
        cart = Cart(user_id=user_id)
        session.add(cart)
        session.commit()
        session.refresh(cart)
    return cart


def add_to_cart(session: Session, user_id: int, product_id: int, quantity: int = 1) -> Cart:
    if quantity < 1:
        raise InvalidQuantity(quantity)

    product = session.get(Product, product_id)
    if not product:
        raise ProductNotFound(product_id)

    cart = get_cart(session, user_id)
    item = _find_item(cart, product_id)
    new_quantity = quantity + (item.quantity if item else 0)

    # advisory only, the real check happens at checkout
    if product.stock < new_quantity:
        raise InsufficientStock(product_id, new_quantity, product.stock, title=product.title)

    if item:
        item.quantity = new_quantity
        item.price = product.price
    else:
        cart.items.append(CartItem(product_id=product.id, quantity=quantity, price=product.price))

    _recalculate(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def update_cart_item(session: Session, user_id: int, product_id: int, quantity: int) -> Cart:
    if quantity < 1:
        raise InvalidQuantity(quantity)

    product = session.get(Product, product_id)
    if not product:
        raise ProductNotFound(product_id)
    if product.stock < quantity:
        raise InsufficientStock(product_id, quantity, product.stock, title=product.title)

    cart = get_cart(session, user_id)
    item = _find_item(cart, product_id)
    if not item:
        raise CartItemNotFound(product_id)

    item.quantity = quantity
    item.price = product.price

    _recalculate(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def remove_from_cart(session: Session, user_id: int, product_id: int) -> Cart:
    cart = get_cart(session, user_id)
    item = _find_item(cart, product_id)
    if item:
        cart.items.remove(item)

    _recalculate(cart)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def clear_cart(session: Session, user_id: int, commit: bool = True) -> Cart:
    """Empty the cart but keep the row. With commit=False the caller owns the transaction."""
    cart = get_cart(session, user_id)
    cart.items.clear()
    cart.total_amount = to_money(0)
    cart.updated_at = utcnow()
    session.add(cart)

    if commit:
        session.commit()
        session.refresh(cart)
    return cart
