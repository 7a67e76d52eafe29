import logging

from sqlmodel import Session

from storefront.config import settings
from storefront.database import engine
from storefront.logging_config import configure_logging
from storefront.services.reservation_journal import recover_stale_reservations

logger = logging.getLogger(__name__)


def run_reservation_recovery(bind=None) -> int:
    with Session(bind or engine) as session:
        swept = recover_stale_reservations(session)

    logger.info(f"Reservation recovery swept {swept} stale intents")
    return swept


if __name__ == "__main__":
    configure_logging(settings.log_level)
    run_reservation_recovery()
