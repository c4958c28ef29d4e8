"""Run the API with uvicorn: `neighbourly` or `python -m neighbourly`."""
import uvicorn

from neighbourly.core.config import settings


def main() -> None:
    uvicorn.run("neighbourly.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
