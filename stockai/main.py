"""
Main application entry point.
Configures logging and serves the quote API.
"""
import logging
import sys

import uvicorn

from stockai.api.routes import create_app
from stockai.config.settings import settings

# Configure logging for stdout/stderr collectors
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
    force=True,
)

logger = logging.getLogger(__name__)

app = create_app()


def main():
    """Run the application."""
    logger.info(
        "Configuration loaded",
        extra={
            "host": settings.host,
            "port": settings.port,
            "log_level": settings.log_level,
            "synthetic_fallback_enabled": settings.synthetic_fallback_enabled,
            "finnhub_configured": bool(settings.finnhub_api_key),
            "alpha_vantage_configured": bool(settings.alpha_vantage_api_key),
        },
    )

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
