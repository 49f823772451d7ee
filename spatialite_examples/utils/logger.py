import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

_LOGGER_NAME = "spatialite_examples"
_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_MAX_LINES = 5000
_BACKUP_COUNT = 20


class LineRotatingFileHandler(RotatingFileHandler):
    """
    Rotates log after a maximum number of lines, not bytes.
    """
    def __init__(self, filename, maxLines, backupCount=0, encoding=None):
        super().__init__(filename, maxBytes=0, backupCount=backupCount, encoding=encoding)
        self.maxLines = maxLines
        self.lineCount = 0
        self._count_existing_lines()

    def _count_existing_lines(self):
        try:
            with open(self.baseFilename, 'r', encoding=self.encoding or 'utf-8') as f:
                self.lineCount = sum(1 for _ in f)
        except FileNotFoundError:
            self.lineCount = 0

    def emit(self, record):
        super().emit(record)
        self.lineCount += 1
        if self.lineCount >= self.maxLines:
            self.doRollover()
            self.lineCount = 0


class _StdStreamHandler(logging.StreamHandler):
    """
    Writes to whatever sys.stdout / sys.stderr is at emit time, so redirected
    streams (tests, embedding) still receive the output.
    """
    def __init__(self, stream_name: str):
        self._stream_name = stream_name
        super().__init__()

    @property
    def stream(self):
        return getattr(sys, self._stream_name)

    @stream.setter
    def stream(self, value):
        pass


class _BelowLevel(logging.Filter):
    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record):
        return record.levelno < self.level


def setup_logger(log_file: Optional[str] = None, level: int = logging.INFO) -> logging.Logger:
    """
    Set up the shared logger: progress (below WARNING) goes to stdout,
    diagnostics (WARNING and above) go to stderr.
    If log_file is given, also log there, rotating after 5000 lines and keeping the last 20 logs.
    Call this once at program startup.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    formatter = logging.Formatter(_FORMAT)
    if not logger.handlers:
        out = _StdStreamHandler("stdout")
        out.setLevel(logging.DEBUG)
        out.addFilter(_BelowLevel(logging.WARNING))
        out.setFormatter(formatter)
        logger.addHandler(out)

        err = _StdStreamHandler("stderr")
        err.setLevel(logging.WARNING)
        err.setFormatter(formatter)
        logger.addHandler(err)

    if log_file and not any(isinstance(h, LineRotatingFileHandler) for h in logger.handlers):
        fh = LineRotatingFileHandler(log_file, maxLines=_MAX_LINES, backupCount=_BACKUP_COUNT, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        logger.addHandler(fh)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the shared project logger, or a child of it, for use in other modules.
    """
    if name:
        return logging.getLogger(f"{_LOGGER_NAME}.{name}")
    return logging.getLogger(_LOGGER_NAME)
