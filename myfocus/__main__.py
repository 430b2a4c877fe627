"""
Main entry point for the MyFocus API.
"""
import uvicorn

from myfocus.core.settings import settings


def main():
    uvicorn.run(
        "myfocus.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
