import logging
import sys
from typing import List, Optional

from finplan.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure root logging for worker and CLI processes."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file = log_file or settings.LOG_FILE
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
