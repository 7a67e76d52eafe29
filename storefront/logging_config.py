import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO"):
    """Configure root logging once for the API process and the jobs."""
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return

    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQL echo is controlled by the engine, keep the pool quiet
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
