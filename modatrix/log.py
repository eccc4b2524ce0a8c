import logging
import os
import sys
from logging import handlers
from pathlib import Path

import coloredlogs
import sentry_sdk
from pydis_core.utils import logging as core_logging
from sentry_sdk.integrations.logging import LoggingIntegration

from modatrix import constants

get_logger = core_logging.get_logger

# Libraries pulled in through pydis_core which are of no interest when filtering chat.
QUIET_LOGGERS = ("discord", "pydis_core", "urllib3")


def setup() -> None:
    """Set up console logging, and file logging if enabled."""
    root_log = get_logger()

    if constants.FILE_LOGS:
        root_log.addHandler(_file_handler(Path(constants.Miscellaneous.log_dir, "modatrix.log")))

    _install_coloredlogs(root_log)
    root_log.setLevel(logging.DEBUG if constants.DEBUG_MODE else logging.INFO)

    for name in QUIET_LOGGERS:
        get_logger(name).setLevel(logging.WARNING)

    _set_trace_loggers()


def _file_handler(log_file: Path) -> logging.Handler:
    """Create a handler writing to `log_file`, rotated every 5 MiB."""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = handlers.RotatingFileHandler(log_file, maxBytes=5242880, backupCount=7, encoding="utf8")
    file_handler.setFormatter(core_logging.log_format)
    return file_handler


def _install_coloredlogs(root_log: logging.Logger) -> None:
    """Send logs to stdout in colour, unless the styles are overridden through coloredlogs' env vars."""
    if "COLOREDLOGS_LEVEL_STYLES" not in os.environ:
        coloredlogs.DEFAULT_LEVEL_STYLES = {
            **coloredlogs.DEFAULT_LEVEL_STYLES,
            "trace": {"color": 246},
            "critical": {"background": "red"},
            "debug": coloredlogs.DEFAULT_LEVEL_STYLES["info"]
        }

    if "COLOREDLOGS_LOG_FORMAT" not in os.environ:
        coloredlogs.DEFAULT_LOG_FORMAT = core_logging.log_format._fmt

    coloredlogs.install(level=core_logging.TRACE_LEVEL, logger=root_log, stream=sys.stdout)


def setup_sentry() -> None:
    """Report warnings and errors to Sentry. Does nothing unless `APP_SENTRY_DSN` is set."""
    if not constants.App.sentry_dsn:
        return

    sentry_sdk.init(
        dsn=constants.App.sentry_dsn,
        integrations=[LoggingIntegration(level=logging.DEBUG, event_level=logging.WARNING)],
    )


def _set_trace_loggers() -> None:
    """
    Set loggers to the trace level according to the value from the APP_TRACE_LOGGERS env var.

    A comma separated list of logger names sets each of those loggers to the trace level.
    Prefixing the list with "!" instead sets every logger except the listed ones to the trace level,
    and a value starting with "*" sets the root logger to the trace level.

    Rejected messages are logged at the trace level, e.g. `APP_TRACE_LOGGERS=modatrix.filtering` shows them.
    """
    level_filter = constants.App.trace_loggers
    if not level_filter:
        return

    if level_filter.startswith("*"):
        get_logger().setLevel(core_logging.TRACE_LEVEL)

    elif level_filter.startswith("!"):
        get_logger().setLevel(core_logging.TRACE_LEVEL)
        for logger_name in level_filter.strip("!,").split(","):
            get_logger(logger_name).setLevel(logging.DEBUG)

    else:
        for logger_name in level_filter.strip(",").split(","):
            get_logger(logger_name).setLevel(core_logging.TRACE_LEVEL)
