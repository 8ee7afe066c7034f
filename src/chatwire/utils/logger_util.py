import logging
from pathlib import Path

from chatwire.config import settings


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """Get a named logger with standard formatting.

    Example:
        logger = get_logger(__name__)
        logger.debug("decoded %s", value)

    The level defaults to ``CHATWIRE_LOG_LEVEL``. A UTF-8 file handler is added
    only when ``CHATWIRE_LOG_DIR`` is configured.

    Returns:
        logging.Logger: Configured logger instance.
    """
    if level is None:
        level = settings.log_level
    logger = logging.getLogger(name)

    # avoid adding duplicate handlers if called repeatedly (common in tests)
    if logger.handlers:
        logger.setLevel(level)
        return logger

    formatter = logging.Formatter(
        "%(asctime)s     || %(name)s \n%(levelname)s   || %(message)s \n",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if settings.log_dir:
        logs_dir = Path(settings.log_dir)
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            logger.warning("cannot create log directory %s, streaming only", logs_dir)
        else:
            filehandler = logging.FileHandler(str(logs_dir / f"{name}.log"), encoding="utf-8")
            filehandler.setFormatter(formatter)
            logger.addHandler(filehandler)

    logger.setLevel(level)
    # stop passing records to the root logger (avoid duplicated messages)
    logger.propagate = False
    return logger
