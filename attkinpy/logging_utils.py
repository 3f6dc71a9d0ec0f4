from typing import ClassVar, Dict, Literal, Optional, Type, Union
import itertools
import logging
import sys
import traceback

from pydantic import BaseModel, Field, field_validator

LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LogColors:
    OKBLUE = '\033[94m'
    OKCYAN = '\033[96m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'  # Reset color
    BOLD = '\033[1m'


class ColoredFormatter(logging.Formatter):
    """ Wraps every record in the color of its level """
    log_format: ClassVar[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    level_colors: ClassVar[Dict[int, str]] = {
        logging.DEBUG: LogColors.OKCYAN,
        logging.INFO: LogColors.OKBLUE,
        logging.WARNING: LogColors.WARNING,
        logging.ERROR: LogColors.FAIL,
        logging.CRITICAL: LogColors.BOLD + LogColors.FAIL,
    }

    def __init__(self) -> None:
        super().__init__(self.log_format)

    def format(self, record: logging.LogRecord) -> str:
        color = self.level_colors.get(record.levelno, LogColors.ENDC)
        return f"{color}{super().format(record)}{LogColors.ENDC}"


class LibraryFormatter(ColoredFormatter):
    """ Compact records for messages emitted while computing """


class DiagnosticFormatter(ColoredFormatter):
    """ Also reports the function and line that emitted the record """
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
    level_colors = {**ColoredFormatter.level_colors, logging.INFO: LogColors.OKCYAN}


class Formatter():
    formatters: ClassVar[Dict[str, Type[ColoredFormatter]]] = {
        "library": LibraryFormatter,
        "diagnostic": DiagnosticFormatter,
    }

    @classmethod
    def get_formatter(cls, formatter: str) -> ColoredFormatter:
        if formatter not in cls.formatters:
            raise ValueError(f"Invalid formatter: {formatter}")
        return cls.formatters[formatter]()


class LoggingConfig(BaseModel):
    level: str = Field("WARNING", description="Level of the loggers owned by attkinpy objects")
    formatter: Literal["library", "diagnostic"] = Field("library", description="Name of the record formatter")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, value):
        if isinstance(value, int):
            return logging.getLevelName(value)
        level = str(value).upper()
        if level not in LEVEL_NAMES:
            raise ValueError(f"Invalid logging level: {value}")
        return level


_instance_counter = itertools.count(1)


def instance_logger_name(obj: object) -> str:
    """A logger name owned by `obj` alone, below its class name."""
    return f"{type(obj).__name__}.{next(_instance_counter)}"


def setup_logging(
    name: str = "attkinpy",
    verbose: Union[str, int] = "WARNING",
    formatter: Literal["library", "diagnostic"] = "library"
) -> logging.Logger:
    """Give the logger `name` a single colored stream handler at level `verbose`."""
    logger = logging.getLogger(name)
    logger.setLevel(verbose)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(verbose)
    handler.setFormatter(Formatter.get_formatter(formatter))
    logger.addHandler(handler)
    return logger


def log_exception(logger: logging.Logger, message: str, exc: Optional[BaseException] = None) -> None:
    """
    Logs `message` with the exception being handled (or `exc`) and the place it was raised.
    """
    if exc is None:
        exc = sys.exc_info()[1]
    frames = traceback.extract_tb(exc.__traceback__) if exc is not None else []
    if frames:
        origin = frames[-1]
        logger.error(f"{message} - Exception occurred in {origin.filename}, line {origin.lineno}: {exc}")
    else:
        logger.error(f"{message} - {exc}")
