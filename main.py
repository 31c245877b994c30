"""
Main entrypoint: run the explorer gateway under uvicorn.

Env: API_HOST, PORT, STELLAR_HORIZON_URL, SOROBAN_RPC_*_URL, etc. (see stellar_explorer/config/env.py)

Equivalent: uvicorn stellar_explorer.api_server.app:app --host 0.0.0.0 --port 3001
"""

import os

# Configure structured JSON logging before other imports that may log
from stellar_explorer.explorer_logging import get_logger

logger = get_logger("main")


def main() -> None:
    from stellar_explorer.config import get_settings
    from stellar_explorer.api_server.app import app
    import uvicorn

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
