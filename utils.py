# utils.py
from __future__ import annotations

import logging
from typing import Any, Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """
    Returns a named logger with a single stream handler attached.

    Calling this repeatedly for the same name never stacks handlers.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    if level:
        logger.setLevel(level.upper())
    return logger


def configure_logging(level: str = "INFO") -> None:
    """Applies one level to every application logger and the root logger."""
    logging.getLogger().setLevel(level.upper())
    for name in ("baserow", "catalog", "product_form", "routes"):
        get_logger(name, level)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

def parse_float(value: Any) -> Optional[float]:
    """
    Parses a leading decimal number the way spreadsheet cells are usually filled.

    "12.50" -> 12.5, " 7 kg" -> 7.0, "abc" -> None, None -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    end = 0
    seen_dot = False
    for i, ch in enumerate(text):
        if ch.isdigit():
            end = i + 1
        elif ch == "." and not seen_dot:
            seen_dot = True
        elif ch in "+-" and i == 0:
            continue
        else:
            break
    if end == 0:
        return None
    try:
        return float(text[:end])
    except ValueError:
        return None


def split_labels(value: Any) -> list[str]:
    """'A, B,,C' -> ['A', 'B', 'C']"""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if str(v).strip()]
    return [part.strip() for part in str(value).split(",") if part.strip()]
