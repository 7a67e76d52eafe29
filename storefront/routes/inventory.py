from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.config import settings
from storefront.database import get_session
from storefront.models.user import User
from storefront.services.inventory_service import inventory_summary, restock
from storefront.utils.token import get_current_admin

router = APIRouter()


@router.get("/summary")
def summary(
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return inventory_summary(session)


@router.patch("/{product_id}/restock")
def restock_product(
    product_id: int,
    quantity: int = Query(..., ge=1),
    session: Session = Depends(get_session),
    admin: User = Depends(get_current_admin),
):
    product = restock(session, product_id, quantity)

    if product.stock == 0:
        stock_status = "Out of Stock"
    elif product.stock <= settings.low_stock_threshold:
        stock_status = "Low Stock"
    else:
        stock_status = "In Stock"

    return {
        "message": "Stock updated successfully",
        "product": {
            "id": product.id,
            "title": product.title,
            "current_stock": product.stock,
            "status": stock_status,
            "updated_at": product.updated_at,
        }
    }
