"""
Run the webhook listener: ``python -m codescribe_bot``.
"""

from __future__ import annotations

import sys

import uvicorn
from dotenv import load_dotenv

from .config import load_settings, missing_required
from .logutil import configure_logging, logger
from .server import create_app


def main() -> int:
    load_dotenv()
    configure_logging()
    settings = load_settings()
    missing = missing_required(settings)
    if missing:
        logger.error("Missing required environment: %s", ", ".join(missing))
        return 1
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
