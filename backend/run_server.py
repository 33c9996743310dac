"""Simple server runner that keeps uvicorn alive."""
import logging
import signal
import sys

import uvicorn

from app.core.config import settings

logger = logging.getLogger("run_server")


def handle_signal(sig, frame):
    logger.info(f"Received signal {sig}, shutting down gracefully...")
    sys.exit(0)


signal.signal(signal.SIGINT, handle_signal)
signal.signal(signal.SIGTERM, handle_signal)

if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    if not settings.DATABASE_URL:
        logger.critical("DATABASE_URL is not set")
        sys.exit(1)

    logger.info(f"Backend listening on port {settings.PORT}")
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
