"""Run the API with uvicorn on the configured HOST and PORT: `python -m skatespots`."""

import uvicorn

from skatespots.config import settings


def main() -> None:
    uvicorn.run(
        "skatespots.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
