"""
Entry point for the gateway.
"""

import uvicorn

from unigate.config import Settings
from unigate.logging_config import setup_logging


def main():
    """
    Start the gateway using uvicorn.
    """
    settings = Settings.get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "unigate.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
