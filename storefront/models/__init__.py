from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.cart import Cart, CartItem
from storefront.models.order_item import OrderItem
from storefront.models.order import Order, OrderStatus, PaymentStatus, PaymentMethod
from storefront.models.order_event import OrderEvent
from storefront.models.reservation import IntentStatus, ReservationIntent, ReservationLine

# add ALL models here
