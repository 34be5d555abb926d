"""Run the gallery with uvicorn: python -m photo_gallery"""

import uvicorn

from photo_gallery.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "photo_gallery.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
