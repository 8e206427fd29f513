from __future__ import annotations

import argparse
import logging

import uvicorn

from ethermine_exporter.core.config import APP_NAME, APP_VERSION, load_settings
from ethermine_exporter.core.logging import setup_logging
from ethermine_exporter.main import create_app
from ethermine_exporter.middleware.request_context import install_request_id_filter

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse flags, configure logging, serve."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME, description="Prometheus exporter for Ethermine/Flypool pool APIs"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Show debug messages, including raw upstream payloads that fail to parse.",
    )
    parser.add_argument(
        "--endpoint",
        default=None,
        help="The address-port endpoint to bind to (default: $ENDPOINT or :8080).",
    )
    args = parser.parse_args(argv)

    try:
        settings = load_settings().with_overrides(debug=args.debug, endpoint=args.endpoint)
    except ValueError as exc:
        parser.error(str(exc))

    setup_logging(settings.effective_log_level, json_format=settings.log_json)
    install_request_id_filter()

    host, port = settings.bind
    logger.info("%s version %s.", APP_NAME, APP_VERSION)
    if settings.debug:
        logger.debug("Debug mode enabled.")
    logger.info("Listening on %s:%d.", host, port)

    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
