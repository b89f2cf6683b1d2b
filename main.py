"""
Main entrypoint: SniffTools FastAPI server.

Loads settings once (.env + environment), fails fast on invalid configuration
(e.g. a SCORE_WEIGHTS table that does not sum to 1), then serves the API.

Env: PORT (default 3000), HOST, BIRDEYE_API_KEY, DEXSCREENER_API_KEY, SOLANA_RPC_URL,
FETCH_TIMEOUT_SEC, FETCH_RETRIES, SCORE_WEIGHTS, CORS_ALLOW_ORIGINS, LOG_LEVEL, LOG_FORMAT.

Equivalent: uvicorn snifftools.api_server.app:app --host 0.0.0.0 --port 3000
"""

import os
import sys

# Configure structured JSON logging before other imports that may log
from snifftools.logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Load settings and run the FastAPI server in the main thread."""
    from snifftools.config import load_settings
    from snifftools.core.exceptions import ConfigurationError

    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error("main_config_error", message=str(e))
        sys.exit(1)

    from snifftools.api_server.server import create_app
    import uvicorn

    app = create_app(settings)
    logger.info("main_server_starting", host=settings.host, port=settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
