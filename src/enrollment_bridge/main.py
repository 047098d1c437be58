"""Command-line entrypoint that serves the API with uvicorn."""

import uvicorn

from enrollment_bridge.config import Settings


def main() -> None:
    """Run the ASGI app on the configured port."""
    settings = Settings()
    uvicorn.run("enrollment_bridge.api.asgi:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
