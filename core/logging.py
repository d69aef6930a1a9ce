import logging
import sys

import json_log_formatter

from core.config import settings

TEXT_FORMAT = "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"


def configure_logging(level_name: str | None = None, as_json: bool | None = None) -> None:
    """Attach a single stdout handler to the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    level_name = (level_name or settings.LOG_LEVEL).upper()
    level = getattr(logging, level_name, logging.INFO)
    as_json = settings.LOG_JSON if as_json is None else as_json

    root = logging.getLogger()
    root.setLevel(level)
    if any(getattr(h, "_classfolio", False) for h in root.handlers):
        return

    if as_json:
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler._classfolio = True
    root.addHandler(handler)

    # requests/urllib3 are chatty at DEBUG and may echo Authorization headers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger(__name__).info("Logging initialized.")
