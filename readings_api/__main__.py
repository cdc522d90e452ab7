"""Entry point: ``python -m readings_api``."""

from __future__ import annotations

import logging

import uvicorn

from common.config import get_settings

from .main import create_app


def main() -> None:
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    app = create_app(settings)
    logging.getLogger(__name__).info(
        "Readings service listening on %s:%d", settings.host, settings.port
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
