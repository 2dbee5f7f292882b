import logging

from wxformat.config import settings

APP_LOGGERS = (
    "wx_format",
    "wx_format.providers",
    "wx_format.formatting",
    "wx_format.templates",
    "wx_format.clipboard",
)

HTTP_CLIENT_LOGGERS = ("urllib3", "httpx", "httpcore", "openai", "anthropic")


def configure_runtime_logging() -> None:
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)

    if settings.suppress_http_client_logs:
        for name in HTTP_CLIENT_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
