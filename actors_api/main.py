"""
Entrypoint: configure logging and serve the API with uvicorn.

Usage:
    python -m actors_api.main
"""

import uvicorn

from actors_api.api import create_app
from actors_api.settings import get_settings


def main() -> None:
    settings = get_settings()
    settings.setup_logging()

    # lifespan="on" makes a failed seeding abort startup instead of being ignored
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        lifespan="on",
        log_config=None,
    )


if __name__ == "__main__":
    main()
