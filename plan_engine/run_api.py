"""
Web API runner

Starts the FastAPI server with uvicorn.
"""
import signal
import sys
import logging
import uvicorn
from dotenv import load_dotenv

# Load .env file before settings are read
load_dotenv()

from plan_engine.config.settings import Settings  # noqa: E402
from plan_engine.config.logging import setup_logging  # noqa: E402

logger = logging.getLogger("plan_engine.runner")


def signal_handler(signum, frame):
    """Handle termination signals"""
    logger.info("Received signal %s, shutting down...", signum)
    sys.exit(0)


def main():
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    config = Settings.from_env()
    setup_logging(
        log_level=config.logging.level,
        json_logs=config.logging.json_logs,
        log_file=config.logging.log_file,
    )

    logger.info("Starting Plan Engine API on %s:%s", config.api.host, config.api.port)
    logger.info(
        "Step delay: %ss, think delay: %ss",
        config.engine.step_delay_seconds,
        config.engine.think_delay_seconds,
    )

    uvicorn.run(
        "plan_engine.api.app:app",
        host=config.api.host,
        port=config.api.port,
        log_level="info"
    )


if __name__ == "__main__":
    main()
