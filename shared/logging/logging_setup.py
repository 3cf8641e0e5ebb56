from datetime import datetime
from pytz import timezone
import logging.config
import logging
import os
from logging import Logger

LOGGER_NAME = "record_indexer"
LOG_FILE_NAME = "indexer.log"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# env vars whose values never reach a log line
SECRET_ENV_SUFFIXES = ("_API_KEY", "_PASSWORD")

_ANSI_RESET = "\033[0m"
_COLOR_MAP: dict[str, str] = {
    "cyan":    "\033[36m",
    "green":   "\033[32m",
    "yellow":  "\033[33m",
    "red":     "\033[31m",
    "magenta": "\033[35m",
    "blue":    "\033[34m",
    "white":   "\033[37m",
}
_LEVEL_PREFIXES: dict[int, str] = {
    logging.WARNING: "⚠️ ",
    logging.ERROR: "⛔ ",
    logging.CRITICAL: "⛔ ",
}


def _is_debug_mode() -> bool:
    return os.getenv("LOG_LEVEL", "info").lower() == "debug"


def _collect_secrets() -> list[str]:
    return [
        value for key, value in os.environ.items()
        if key.upper().endswith(SECRET_ENV_SUFFIXES) and len(value.strip()) >= 4
    ]


class SecretRedactionFilter(logging.Filter):
    """Masks API keys and passwords taken from the environment.

    Backend error bodies and request URLs are logged verbatim, and some
    backends echo the credential they rejected.
    """

    def __init__(self, secrets: list[str] | None = None):
        super().__init__()
        self._secrets = secrets if secrets is not None else _collect_secrets()

    def filter(self, record):
        if not self._secrets:
            return True
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        redacted = message
        for secret in self._secrets:
            redacted = redacted.replace(secret, "***")
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


class CustomFormatter(logging.Formatter):
    """Renders timestamps in the TIMEZONE zone and prefixes warnings and errors."""

    def __init__(self, tz_name, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, self.tz)
        return dt.strftime(datefmt) if datefmt else dt.isoformat()

    def format(self, record):
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # malformed %-args from a third-party logger
            message = str(record.msg)

        # every handler formats the same record, prefix a copy only
        record = logging.makeLogRecord(record.__dict__)
        record.msg = _LEVEL_PREFIXES.get(record.levelno, "") + message
        record.args = ()
        return super().format(record)


class ColoredFormatter(CustomFormatter):
    """Console formatter; wraps a line in ANSI color when the record carries ``color``."""

    def format(self, record) -> str:
        line = super().format(record)
        ansi = _COLOR_MAP.get(getattr(record, "color", None) or "", "")
        return f"{ansi}{line}{_ANSI_RESET}" if ansi else line


class ColorLogger:
    """Logger wrapper that accepts an optional ``color=`` keyword on every log call.

    Usage::

        logger.info("%d documents indexed", count, color="green")

    The color only shows on the console; the log file stays plain text.
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def _log(self, level: int, msg, args, color: str | None, kwargs: dict) -> None:
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        # skip both wrapper frames so %(funcName)s names the caller
        kwargs.setdefault("stacklevel", 3)
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.DEBUG, msg, args, color, kwargs)

    def info(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.INFO, msg, args, color, kwargs)

    def warning(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.WARNING, msg, args, color, kwargs)

    def error(self, msg, *args, color: str | None = None, **kwargs):
        self._log(logging.ERROR, msg, args, color, kwargs)

    def exception(self, msg, *args, color: str | None = None, **kwargs):
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, color, kwargs)

    def __getattr__(self, name):
        return getattr(self._logger, name)


def _build_handlers(loglevel: int, log_to_file: bool) -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "colored",
            "filters": ["redact"],
            "level": loglevel,
            "stream": "ext://sys.stdout",
        },
    }
    if log_to_file:
        log_dir = os.path.join(os.getenv("ROOT_DIR", os.getcwd()), "logs")
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "filters": ["redact"],
            "level": loglevel,
            "filename": os.path.join(log_dir, LOG_FILE_NAME),
            "encoding": "utf-8",
        }
    return handlers


def setup_logging() -> ColorLogger:
    """Configure console and file logging for one indexing run.

    Environment:
        LOG_LEVEL: "debug" enables debug output, including request and SQL logs.
        TIMEZONE: pytz zone of the timestamps (default Europe/Berlin).
        ROOT_DIR: The log file goes to <ROOT_DIR>/logs/indexer.log (default: working directory).
        LOG_TO_FILE: "false" logs to the console only.

    Returns:
        ColorLogger: The application logger.
    """
    debug_mode = _is_debug_mode()
    loglevel = logging.DEBUG if debug_mode else logging.INFO
    tz_name = os.getenv("TIMEZONE", "Europe/Berlin")
    log_to_file = os.getenv("LOG_TO_FILE", "true").lower() in ("true", "1", "yes")
    handlers = _build_handlers(loglevel, log_to_file)

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "redact": {"()": SecretRedactionFilter},
        },
        "formatters": {
            "standard": {"()": CustomFormatter, "format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT, "tz_name": tz_name},
            "colored": {"()": ColoredFormatter, "format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT, "tz_name": tz_name},
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": loglevel,
        },
    })

    logging.getLogger("httpx").setLevel(logging.DEBUG if debug_mode else logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug_mode else logging.WARNING)

    return ColorLogger(logging.getLogger(LOGGER_NAME))
