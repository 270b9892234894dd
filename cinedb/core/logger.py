# cinedb/core/logger.py

import logging
import sys


# ─── Custom Formatter ────────────────────────────────────────────────────────
class CategoryFormatter(logging.Formatter):
    def format(self, record):
        if not hasattr(record, "category"):
            record.category = record.name.rsplit(".", 1)[-1].upper()
        return super().format(record)


formatter = CategoryFormatter(
    fmt="%(asctime)s %(levelname)-8s [%(category)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)


# ─── Public API ───────────────────────────────────────────────────────────────
def setup_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.hasHandlers():
        return logger

    # Prevent duplicate logging by disabling propagation
    logger.propagate = False

    ch = logging.StreamHandler(sys.stdout)
    ch.setLevel(level)
    ch.setFormatter(formatter)
    logger.addHandler(ch)

    return logger


def set_level(level: str) -> None:
    """Apply a level to every cinedb logger created so far."""
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        value = logging.INFO
    for name, lg in logging.root.manager.loggerDict.items():
        if name.startswith("cinedb") and isinstance(lg, logging.Logger):
            lg.setLevel(value)
            for h in lg.handlers:
                h.setLevel(value)
