import logging

import uvicorn

from .core.config import get_settings
from .core.logging_setup import setup_logging

logger = logging.getLogger("task_tracker")


def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    logger.info("Starting %s on %s:%s", settings.PROJECT_NAME, settings.HOST, settings.PORT)
    # uvicorn would otherwise install its own handlers over ours
    uvicorn.run("task_tracker.main:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
