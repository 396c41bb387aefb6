import logging
import sys
from typing import Optional

from .config import load_app_config

_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(level_override: Optional[str] = None) -> None:
    config = load_app_config()
    level_name = (level_override or config.get("log_level") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        stream=sys.stdout,
    )
    # One request line per question drowns out the run summary.
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
