import logging
import logging.handlers
from pathlib import Path
from typing import Optional, Union


def setup_logging(
    log_level: str = "INFO", log_file: Optional[Union[str, Path]] = None
) -> None:
    """Configure logging for the Power Grid engine.

    Installs a console handler and, if ``log_file`` is given, a rotating
    file handler that records everything down to DEBUG. Calling this again
    once the root logger has handlers does nothing.
    """
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return  # Already configured

    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # File handler with rotation (5MB max, keep 3 backups)
        file_handler = logging.handlers.RotatingFileHandler(
            log_path, maxBytes=5 * 1024 * 1024, backupCount=3
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.setLevel(logging.DEBUG)

    logging.getLogger(__name__).info("Logging initialized (level=%s)", log_level)
