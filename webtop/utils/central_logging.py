"""
Central logging for the desktop shell.

Logs go to the console and, unless disabled, to rotating files in LOG_DIR:
- all.log      everything at DEBUG and above
- errors.log   ERROR and above
- windows.log, launcher.log, panels.log   per-category files
"""
import logging
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

FMT = "%(asctime)s|%(levelname)-8s|%(name)-22s|%(message)s"
FMT_DETAIL = "%(asctime)s|%(levelname)-8s|%(name)-22s|%(filename)s:%(lineno)d|%(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"
MAX_BYTES, BACKUP = 10 * 1024 * 1024, 5

CATEGORY_FILES = [
    ("windows", "windows.log"),
    ("layouts", "windows.log"),
    ("desktops", "windows.log"),
    ("launcher", "launcher.log"),
    ("registry", "launcher.log"),
    ("panels", "panels.log"),
    ("http", "panels.log"),
]

_init = {"central": False}


class ColorFormatter(logging.Formatter):
    """Formatter with ANSI colors for console."""
    C = {10: '\033[36m', 20: '\033[32m', 30: '\033[33m', 40: '\033[31m', 50: '\033[35m'}
    R = '\033[0m'

    def format(self, r):
        return f"{self.C.get(r.levelno, '')}{super().format(r)}{self.R}"


@lru_cache(maxsize=16)
def _handler(path: str, level: int = logging.DEBUG) -> RotatingFileHandler:
    """Cached rotating file handler factory."""
    h = RotatingFileHandler(path, maxBytes=MAX_BYTES, backupCount=BACKUP, encoding='utf-8')
    h.setLevel(level)
    h.setFormatter(logging.Formatter(FMT_DETAIL, DATE_FMT))
    return h


def setup_central_logging(
    log_dir: Optional[str] = None,
    console_level: int = logging.INFO,
    enable_console: bool = True,
) -> None:
    """Initialize central logging. Safe to call more than once."""
    if _init["central"]:
        return

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    if enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(console_level)
        console.setFormatter(ColorFormatter(FMT, DATE_FMT))
        root.addHandler(console)

    if log_dir:
        target = Path(log_dir)
        target.mkdir(parents=True, exist_ok=True)
        root.addHandler(_handler(str(target / "all.log")))
        root.addHandler(_handler(str(target / "errors.log"), logging.ERROR))

        for name, filename in CATEGORY_FILES:
            lg = logging.getLogger(f"webtop.{name}")
            lg.addHandler(_handler(str(target / filename)))
            lg.propagate = True

    logging.getLogger("httpx").setLevel(logging.WARNING)

    _init["central"] = True
    root.info(f"Webtop logging initialized | log_dir={log_dir or '-'}")

