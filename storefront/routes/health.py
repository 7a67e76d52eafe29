from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from storefront.database import get_session
from storefront.models.base import utcnow

router = APIRouter()


@router.get("/check")
def health_check(session: Session = Depends(get_session)):
    db_status = "ok"

    try:
        # simple DB ping
        session.exec(text("SELECT 1"))
    except SQLAlchemyError:
        db_status = "failed"

    return {
        "status": "ok",
        "database": db_status,
        "timestamp": utcnow().isoformat()
    }
