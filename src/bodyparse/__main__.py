"""Run the bodyparse API server."""

import uvicorn

from bodyparse.config import get_settings


def main() -> None:
    """Serve ``bodyparse.main:app`` on the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "bodyparse.main:app",
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=settings.timeout_keep_alive,
        log_level="debug" if settings.app_debug else "info",
        reload=settings.is_development and settings.app_debug,
    )


if __name__ == "__main__":
    main()
