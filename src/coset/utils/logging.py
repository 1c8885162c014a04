import logging
import sys


def get_logger():
    logger = logging.getLogger("coset")
    if not logger.handlers:
        # stdout is reserved for CLI output (payloads)
        h = logging.StreamHandler(sys.stderr)
        fmt = logging.Formatter("[%(asctime)s] %(levelname)s %(message)s")
        h.setFormatter(fmt)
        logger.addHandler(h)
        logger.setLevel(logging.INFO)
    return logger
