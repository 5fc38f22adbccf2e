# backend/app/core/logging.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # passlib journalise un warning bruyant sur la version de bcrypt
    logging.getLogger("passlib").setLevel(logging.ERROR)
