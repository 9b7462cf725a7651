# main.py

from uvicorn import run

from app.configs import settings
from app.main import app

__all__ = ["app"]


def main() -> None:
    """Serve the API locally with auto-reload outside production."""
    run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=settings.ENVIRONMENT != "production",
        log_level=settings.LOG_LEVEL.lower(),
        loop="uvloop",
        http="httptools",
    )


if __name__ == "__main__":
    main()
