"""ASGI entrypoint for the image conversion service."""

import uvicorn

from .api import create_app
from .config import settings

app = create_app(settings)


def main():
    """Run the image conversion service."""
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
