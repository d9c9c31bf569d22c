"""Logging configuration for the judge service."""

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO", debug: bool = False) -> None:
    """Configure root logging once at process start."""
    logging.basicConfig(
        level=logging.DEBUG if debug else level.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
        force=True,
    )
    # SQL echo is controlled by the engine's own flag
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
