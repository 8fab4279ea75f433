"""Run the accounts API with uvicorn: ``python -m accounts_api``."""

import logging

import uvicorn

from accounts_api.config import get_settings


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logging.getLogger(__name__).info("API starting on port %s", settings.port)
    uvicorn.run(
        "accounts_api.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
