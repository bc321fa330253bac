import logging


def setup_logging():
    """
    Configure logging from settings.

    LOG_FORMAT "json" or "console" wins; "auto" renders JSON in production.
    """
    from .config import get_settings
    from .structured_logging import configure_logging

    settings = get_settings()
    level = (settings.LOG_LEVEL or "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        level = "INFO"

    log_format = (settings.LOG_FORMAT or "auto").lower()
    if log_format == "auto":
        json_output = settings.ENVIRONMENT.lower() == "production"
    else:
        json_output = log_format == "json"

    configure_logging(level=level, json_output=json_output, log_file=settings.LOG_FILE or None)
