# speechcraft/utils/logconf.py
import logging, sys


def init(level: str = "INFO"):
    """Configure root logger once per process."""
    fmt = "%(asctime)s | %(levelname)-5s | %(module)s | %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
