from __future__ import annotations

import logging
import logging.handlers
import os
import time
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_FILENAME = "bot.log"
DEFAULT_MAX_BYTES = 20 * 1024 * 1024


class SizedTimedRotatingFileHandler(logging.handlers.TimedRotatingFileHandler):
    """
    Midnight rotation that also rolls the file early once it passes max_bytes.

    Early rollovers keep the midnight schedule and are named
    `bot.log.<date>.<n>`; the midnight ones keep the stdlib `bot.log.<date>`.
    """

    def __init__(self, filename, max_bytes: int = 0, **kwargs) -> None:  # noqa: ANN001
        super().__init__(filename, **kwargs)
        self.max_bytes = int(max_bytes)

    def _over_size(self, record: logging.LogRecord) -> bool:
        if self.max_bytes <= 0:
            return False
        if self.stream is None:
            self.stream = self._open()
        self.stream.seek(0, 2)
        size = self.stream.tell()
        # a single oversized record on an empty file is written, not rotated
        return size > 0 and size + len(self.format(record)) + 1 >= self.max_bytes

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        if super().shouldRollover(record):
            return True
        return self._over_size(record)

    def doRollover(self) -> None:
        if int(time.time()) >= self.rolloverAt:
            super().doRollover()
            return

        if self.stream:
            self.stream.close()
            self.stream = None

        stamp = time.strftime(self.suffix, time.localtime())
        n = 1
        while os.path.exists(f"{self.baseFilename}.{stamp}.{n}"):
            n += 1
        self.rotate(self.baseFilename, f"{self.baseFilename}.{stamp}.{n}")

        if not self.delay:
            self.stream = self._open()


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = "./logs",
    retention_days: int = 14,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> logging.Logger:
    """
    Console + daily rotated file logging on the root logger.

    Rotation happens at midnight, or earlier once the file reaches
    `max_bytes`; `retention_days` rotated files are kept.
    Pass log_dir=None to log to the console only.
    Safe to call more than once (handlers installed here are replaced).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    for h in list(root.handlers):
        if getattr(h, "_topsync_handler", False):
            root.removeHandler(h)
            h.close()

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console._topsync_handler = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = SizedTimedRotatingFileHandler(
            path / LOG_FILENAME,
            max_bytes=max_bytes,
            when="midnight",
            backupCount=max(1, int(retention_days)),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        file_handler._topsync_handler = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    return root


__all__ = ["configure_logging", "SizedTimedRotatingFileHandler", "LOG_FORMAT", "LOG_FILENAME", "DEFAULT_MAX_BYTES"]
