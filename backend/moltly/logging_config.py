# backend/moltly/logging_config.py
import logging
import sys

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level)
    # uvicorn --reload imports twice; keep a single handler
    for h in root.handlers:
        if getattr(h, "_moltly", False):
            return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    handler._moltly = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    # quiet chatty client libraries
    for name in ("botocore", "boto3", "urllib3", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)
