"""Start the dev server."""

import uvicorn

from lanyard.config import settings


def main():
    uvicorn.run("lanyard.main:app", reload=True, log_level=settings.log_level, timeout_graceful_shutdown=1)


if __name__ == "__main__":
    main()
