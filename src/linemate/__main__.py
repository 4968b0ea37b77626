"""
Run the relay: `python -m src.linemate`.

Exit codes:
- 0 after a graceful shutdown (SIGINT/SIGTERM, handled by uvicorn)
- 1 if any collaborator fails to initialize at startup
"""

from __future__ import annotations

import sys

import uvicorn

from src.linemate.bootstrap import build_services
from src.linemate.config.settings import settings
from src.linemate.exceptions import StartupError
from src.linemate.logging.logger import setup_logger
from src.linemate.main import create_app

logger = setup_logger("src.linemate")


def main() -> int:
    try:
        services = build_services(settings)
    except StartupError as exc:
        logger.error("Failed to start server | error=%s", exc, exc_info=exc.cause)
        return 1

    app = create_app(services)
    logger.info("Webhook URL: http://localhost:%s/webhook", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.app_log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
