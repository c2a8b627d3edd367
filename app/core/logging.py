import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging once for the API process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)

    # SQLAlchemy echo is driven by DB_ECHO, keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
