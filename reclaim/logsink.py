"""
Log sink for reclaim runs.

One append-only text file per host. Every line is timestamped and echoed to
the terminal; raw tool output is appended to the file only. If the file has
grown past its ceiling when the sink is opened, it is moved aside to
``<name>.old`` first. That check happens once, at startup.

The file is opened when the sink is built, so an unwritable path fails with
``OSError`` up front. ``LogSink.terminal_only`` gives a sink with the echo
and no file; tool output is discarded in that mode.

The sink logger is the package logger ``reclaim``. Module loggers propagate
into it, so their debug records reach the terminal with ``--verbose``.
"""

import logging
import os
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional

from rich.logging import RichHandler

from reclaim.config import RunConfig
from reclaim.ui.console import ReclaimConsole, console as default_console

LOGGER_NAME = "reclaim"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _old_suffix(default_name: str) -> str:
    # RotatingFileHandler proposes "<log>.1" for the single backup
    return default_name.rsplit(".", 1)[0] + ".old"


class SinkFormatter(logging.Formatter):
    """``[timestamp] message`` with an ERROR:/WARNING: marker by level."""

    PREFIXES = {
        logging.WARNING: "WARNING: ",
        logging.ERROR: "ERROR: ",
        logging.CRITICAL: "ERROR: ",
    }

    def __init__(self):
        super().__init__("[%(asctime)s] %(message)s", TIMESTAMP_FORMAT)

    def formatMessage(self, record: logging.LogRecord) -> str:
        record.message = self.PREFIXES.get(record.levelno, "") + record.message
        return super().formatMessage(record)


class LogSink:
    """Append-only run log with startup rotation and terminal echo."""

    def __init__(
        self,
        path: Optional[str],
        max_size: int,
        verbose: bool = False,
        console: Optional[ReclaimConsole] = None,
    ):
        """
        Open the sink, rotating the existing file if it is oversized.

        Args:
            path: Log file path, or None for terminal output only
            max_size: Rotation ceiling in bytes
            verbose: Echo debug records to the terminal
            console: Console used for the terminal echo

        Raises:
            OSError: If the log file cannot be created or opened
        """
        self.path = Path(path) if path is not None else None
        self.max_size = max_size
        self.rotated = False

        self._file_handler = None
        if self.path is not None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._file_handler = RotatingFileHandler(
                self.path, maxBytes=0, backupCount=1, encoding="utf-8"
            )
            self._file_handler.namer = _old_suffix
            self._file_handler.setLevel(logging.INFO)
            self._file_handler.setFormatter(SinkFormatter())
            self._rotate_if_oversized()

        echo_console = console or default_console
        self._echo_handler = RichHandler(
            console=echo_console.rich,
            show_path=False,
            markup=False,
            log_time_format=f"[{TIMESTAMP_FORMAT}]",
        )
        self._echo_handler.setLevel(logging.DEBUG if verbose else logging.INFO)

        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self._detach_stale_handlers()
        for handler in self._handlers():
            self.logger.addHandler(handler)

    @classmethod
    def from_config(cls, config: RunConfig) -> "LogSink":
        return cls(config.log_path, config.max_log_size, verbose=config.verbose)

    @classmethod
    def terminal_only(
        cls, verbose: bool = False, console: Optional[ReclaimConsole] = None
    ) -> "LogSink":
        return cls(None, 0, verbose=verbose, console=console)

    def _handlers(self) -> List[logging.Handler]:
        return [h for h in (self._file_handler, self._echo_handler) if h is not None]

    def _rotate_if_oversized(self) -> None:
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return
        if size > self.max_size:
            self._file_handler.doRollover()
            self.rotated = True

    def _detach_stale_handlers(self) -> None:
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

    def info(self, message: str, *args) -> None:
        self.logger.info(message, *args)

    def debug(self, message: str, *args) -> None:
        self.logger.debug(message, *args)

    def warning(self, message: str, *args) -> None:
        self.logger.warning(message, *args)

    def error(self, message: str, *args) -> None:
        self.logger.error(message, *args)

    @contextmanager
    def raw_stream(self) -> Iterator[BinaryIO]:
        """Yield the log file opened for appending raw bytes.

        Buffered log records are flushed first so raw output lands after
        the lines that introduced it.
        """
        if self._file_handler is None:
            with open(os.devnull, "ab") as stream:
                yield stream
            return

        self._file_handler.flush()
        with open(self.path, "ab") as stream:
            yield stream

    def write_raw(self, text: str) -> None:
        """Append text verbatim, without timestamp and without echo."""
        if text and not text.endswith("\n"):
            text += "\n"
        with self.raw_stream() as stream:
            stream.write(text.encode("utf-8"))

    def close(self) -> None:
        for handler in self._handlers():
            self.logger.removeHandler(handler)
            handler.close()

    def __enter__(self) -> "LogSink":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
