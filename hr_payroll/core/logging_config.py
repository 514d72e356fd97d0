# hr_payroll/core/logging_config.py

import logging
from typing import Optional

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure root logging for CLI and worker entry points."""
    settings = settings or get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level), format=LOG_FORMAT)

    if settings.log_sql_queries:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
