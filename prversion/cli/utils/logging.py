import logging
import sys


logger = logging.getLogger("prversion")

PLAIN_FORMAT = "%(message)s"
DEBUG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool):
    """
    Send prversion logs to stderr, at DEBUG level with the emitting module
    under --debug, as bare INFO messages otherwise.

    stdout carries only the result a command prints with click.echo, so a
    pipeline can capture it as is.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    formatter = logging.Formatter(DEBUG_FORMAT if debug else PLAIN_FORMAT)
    for handler in logger.handlers:
        handler.setFormatter(formatter)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
