from sqlmodel import SQLModel, create_engine, Session
from storefront.config import settings


def build_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
        return create_engine(url, echo=False, connect_args=connect_args)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,      # checks dead connections
        pool_recycle=1800        # refresh every 30 min
    )


engine = build_engine(settings.database_url)


def create_db_and_tables(bind=None):
    from storefront.models import (  # noqa: F401
        user, product, cart, order, order_item, order_event, reservation
    )
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
