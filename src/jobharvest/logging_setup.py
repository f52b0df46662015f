# src/jobharvest/logging_setup.py
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Single stream handler on the root logger; safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(getattr(h, "_jobharvest", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._jobharvest = True
        root.addHandler(handler)
    # http and google auth clients are chatty at INFO
    for noisy in ("httpx", "urllib3", "google.auth", "apscheduler.executors.default"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
