"""Main entry point for the application index service."""

import sys
import time

from .api_server import start_api_server
from .config import load_config
from .controller import IndexController
from .exceptions import ConfigError, RefreshError, StoreError
from .log import configure_logging


def time_operation(logger, operation_name: str, func, *args, **kwargs):
    """
    Time an operation and log the duration.

    Args:
        logger: Logger to report through
        operation_name: Name of the operation for display
        func: Function to call
        *args, **kwargs: Arguments to pass to the function

    Returns:
        Result of the function call
    """
    start_time = time.time()
    result = func(*args, **kwargs)
    elapsed = time.time() - start_time
    logger.info("%s took: %.2fs", operation_name, elapsed)
    return result


def main():
    """Load the index, serve the local API and wait until interrupted."""
    try:
        config = load_config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    logger = configure_logging(config.log_level, config.log_file)
    logger.info("Scan sources: %s", ", ".join(config.search_paths) or "(none)")

    try:
        controller = IndexController.from_config(config, logger=logger)
    except StoreError as e:
        logger.error("Cannot open application database %s: %s", config.db_path, e)
        sys.exit(1)

    try:
        time_operation(logger, "Index initialization", controller.init)
    except RefreshError as e:
        logger.error("Error initializing application index: %s", e)
        sys.exit(1)

    # Start local API server for the launcher UI
    try:
        start_api_server(controller, port=config.api_port)
    except Exception as e:
        logger.warning("Could not start local API server: %s", e)

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
