"""Logging setup for the checkout demo.

One console handler on the ``showready`` logger; uvicorn keeps its own
access/error loggers.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logger = logging.getLogger("showready")
    logger.setLevel(level)
    # idempotent: app factories may run more than once per process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
