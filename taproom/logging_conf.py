import logging
import os
from logging.handlers import RotatingFileHandler


DEFAULT_LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s "
    "pid=%(process)d "
    "%(message)s"
)

# Third-party loggers that follow the app level instead of their own defaults.
_FOLLOWERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "gunicorn.error",
    "gunicorn.access",
)


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def configure_logging(
    *,
    level: str = "INFO",
    log_file: str | None = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure application logging.

    Stdout is always used (journald picks it up under systemd); a rotating
    file is added when ``log_file`` is set. Safe to call more than once.
    """

    level_value = getattr(logging, level.upper(), logging.INFO)

    # Reset root handlers to avoid duplicated logs on reload.
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(level_value)

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level_value)
    stream_handler.setFormatter(formatter)
    root.addHandler(stream_handler)

    if log_file:
        _ensure_parent_dir(log_file)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count
        )
        file_handler.setLevel(level_value)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    for name in _FOLLOWERS:
        logging.getLogger(name).setLevel(level_value)

    # pypdf is chatty about slightly malformed form dictionaries.
    logging.getLogger("pypdf").setLevel(max(level_value, logging.ERROR))
