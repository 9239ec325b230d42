import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Root logger to stderr, plus an optional log file.
    Report output goes to stdout, so logs never mix into it.
    """
    level = (level or "WARNING").upper()
    if level not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
