"""Main entry point: serve the open items index to the launcher UI."""

import logging
import sys

from .api_server import ServiceLoop, serve, user_is_typing
from .config import Config
from .logging_setup import configure_logging
from .service import build_service

logger = logging.getLogger(__name__)


def main() -> int:
    configure_logging()
    config = Config()

    service = build_service(config, defer_refresh=user_is_typing)
    service_loop = ServiceLoop().start()

    # Warm the "all apps" cache so the first query is instant
    service_loop.call(service.prewarm)

    try:
        serve(service, service_loop, port=config.api_port)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        service_loop.submit(service.close())
        service_loop.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
