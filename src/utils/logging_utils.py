"""Logging helpers for pcapmap."""

from __future__ import annotations

import logging
from typing import Optional


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger."""

    return logging.getLogger(name if name else "pcapmap")


__all__ = ["get_logger"]
