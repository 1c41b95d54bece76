"""Run the quote API with uvicorn: python -m loyalty"""

import uvicorn

from loyalty.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "loyalty.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,  # keep the JSON handler installed by create_app
    )


if __name__ == "__main__":
    main()
