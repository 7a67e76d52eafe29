from pydantic import BaseModel, Field


class CartAddRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class CartUpdateRequest(BaseModel):
    quantity: int = Field(ge=1)


def cart_to_dict(cart) -> dict:
    return {
        "cart_id": cart.id,
        "user_id": cart.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "price": i.price,
                "total": i.price * i.quantity,
            }
            for i in cart.items
        ],
        "total_amount": cart.total_amount,
        "updated_at": cart.updated_at,
    }
