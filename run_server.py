#!/usr/bin/env python3
"""
Message board server
Serves the thread and reply API with uvicorn
"""
import logging
import sys
import uvicorn
from config import DEFAULT_HOST, DEFAULT_PORT, DB_PATH, LOG_FILE, LOG_LEVEL
from logging_config import setup_logging

logger = logging.getLogger("run_server")


def main():
    setup_logging(LOG_LEVEL, LOG_FILE)
    logger.info("Starting message board server on %s:%s (database: %s)", DEFAULT_HOST, DEFAULT_PORT, DB_PATH)
    logger.info("API endpoints: /api/threads/{board} and /api/replies/{board}")

    try:
        # Import here so logging is configured before the app is built
        from app import app

        uvicorn.run(
            app,
            host=DEFAULT_HOST,
            port=DEFAULT_PORT,
            reload=False,
            access_log=True,
            log_config=None
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Error starting server")
        sys.exit(1)

if __name__ == "__main__":
    main()
