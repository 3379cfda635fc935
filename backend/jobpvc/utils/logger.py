import logging
import os
from collections.abc import MutableMapping
from typing import Any

# Read here rather than in app_configs, which logs while it loads
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info")

_LOG_FORMAT = "%(asctime)s %(filename)30s %(lineno)4s: %(message)s"
_DATE_FORMAT = "%m/%d/%Y %I:%M:%S %p"


def get_log_level_from_str(log_level_str: str = LOG_LEVEL) -> int:
    log_level_dict = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
        "NOTSET": logging.NOTSET,
    }

    return log_level_dict.get(log_level_str.upper(), logging.INFO)


class JobPVCLoggingAdapter(logging.LoggerAdapter):
    """Prefixes every message with the static context given to setup_logger().

    Example: setup_logger(extra={"namespace": "ci"}) logs
    "[namespace: ci] Created PVC ci/pvc-job1"
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        if self.extra:
            prefix = " ".join(f"[{key}: {value}]" for key, value in self.extra.items())
            msg = f"{prefix} {msg}"
        return msg, kwargs


class PlainFormatter(logging.Formatter):
    """Adds the level name in front of the configured format."""

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        level_display = f"{levelname}:".ljust(9)
        message = super().format(record)
        return f"{level_display}{message}"


def get_standard_formatter() -> PlainFormatter:
    return PlainFormatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)


def setup_logger(
    name: str = __name__,
    log_level: int = get_log_level_from_str(),
    extra: dict[str, Any] | None = None,
    propagate: bool = True,
) -> JobPVCLoggingAdapter:
    logger = logging.getLogger(name)

    # If the logger already has handlers, assume it was already configured
    # and return it wrapped.
    if logger.hasHandlers():
        return JobPVCLoggingAdapter(logger, extra=extra or {})

    logger.setLevel(log_level)

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(get_standard_formatter())
    logger.addHandler(handler)

    logger.propagate = propagate

    return JobPVCLoggingAdapter(logger, extra=extra or {})
