import os
import sys
from loguru import logger
# load environment variables from .env file if it exists
from dotenv import load_dotenv
load_dotenv()

DEFAULT_CONSOLE_LOG_FILE = "tryon-console.log"
CONSOLE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class ConsoleLogger:
    """Human-readable loguru logger for the CLI client and the auth routes."""

    def __init__(self):
        self.logger = logger
        self._configure_logger()

    def _configure_logger(self):
        self.logger.remove()  # Remove default handler

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        self.logger.add(
            sys.stderr,
            level=log_level,
            format=CONSOLE_FORMAT,
            serialize=False,
            enqueue=True,  # Use a queue for non-blocking logging
        )
        if os.getenv("LOG_TO_FILE", "false").lower() == "true":
            self.logger.add(
                os.getenv("CONSOLE_LOG_FILE_PATH", DEFAULT_CONSOLE_LOG_FILE),
                level=log_level,
                format=CONSOLE_FORMAT,
                serialize=False,
                rotation="10 MB",
                compression="zip",
                enqueue=True,
            )


# Initialize the logger
console_logger = ConsoleLogger().logger
