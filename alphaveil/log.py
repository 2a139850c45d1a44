"""Logging setup shared by the command line and the web app."""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    if level is None:
        from .config import get_settings

        level = get_settings().log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level '{level}'")
        level = resolved
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("alphaveil").setLevel(level)
