"""Run the API server: python -m relnotes"""

import uvicorn

from relnotes.core.config import settings


def main() -> None:
    uvicorn.run(
        "relnotes.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
