"""
Main entrypoint: donation ledger API server.

Env: DATABASE_URL, API_HOST, API_PORT, LOG_LEVEL, etc.

Equivalent: uvicorn backend_givefi.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

from backend_givefi.config import get_settings
from backend_givefi.givefi_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the FastAPI ledger server in the main thread."""
    import uvicorn

    from backend_givefi.api_server.app import app

    settings = get_settings()
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
