import os
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Optional

# Substrings that mark an environment variable as sensitive
SENSITIVE_ENV_VARS = [
    "PASSWORD", "PASS", "SECRET", "TOKEN", "KEY", "AUTH", "CREDENTIAL", "CRED",
    "API_KEY", "PRIVATE_KEY", "CERT", "PEM",
]
REDACTED = "[REDACTED]"


def setup_logging(log_level: Optional[str] = None, log_dir: Optional[str] = None):
    """Setup logging configuration with optional file rotation"""

    # Get log level from environment
    log_level = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, log_level, None)
    if not isinstance(level, int):
        level = logging.INFO
        log_level = "INFO"

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # Create root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        # Create logs directory if it doesn't exist
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # File handler with rotation at midnight
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_path / "adsb2loki.log",
            when="midnight",
            interval=1,
            backupCount=7,  # Keep 7 days of logs
            encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Reduce noise from some loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.info(f"Logging initialized at {log_level} level")

    if level == logging.DEBUG:
        log_environment()


def is_sensitive_env_var(name: str) -> bool:
    """Check whether an environment variable name looks like it holds a secret"""
    upper_name = name.upper()
    return any(marker in upper_name for marker in SENSITIVE_ENV_VARS)


def redacted_environment(environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    environ = os.environ if environ is None else environ
    return {
        key: REDACTED if is_sensitive_env_var(key) else value
        for key, value in environ.items()
    }


def log_environment(logger: Optional[logging.Logger] = None):
    """Log environment variables at debug level with secrets redacted"""
    logger = logger or logging.getLogger(__name__)
    logger.debug(f"Environment variables loaded: {redacted_environment()}")
