"""
Structured one-line JSON logging shared by the server and the dispatcher.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

logger = logging.getLogger("codescribe_bot")


def configure_logging() -> None:
    level_name = (os.getenv("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logger.setLevel(level)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    if root.level and root.level > level:
        root.setLevel(level)


def log_event(msg: str, **fields: Any) -> None:
    try:
        rec = {"msg": msg, **fields}
        logger.info(json.dumps(rec, ensure_ascii=False))
    except Exception:
        # Fallback to plain log
        logger.info("%s | %s", msg, fields)
