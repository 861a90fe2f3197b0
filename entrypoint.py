import argparse
import os

import uvicorn

from constants import CONTROL_PORT, HOST, SIGNALING_PORT
from logging_config import setup_logging

# Setup logging before importing the apps
log_level = os.getenv("LOG_LEVEL", "INFO")
log_file = os.getenv("LOG_FILE", None)
setup_logging(log_level=log_level, log_file=log_file)

from logging_config import get_logger

logger = get_logger(__name__)


def run_signaling(host: str, port: int) -> None:
    from signaling_app import app

    logger.info(f"Signaling relay starting on ws://{host}:{port}/ws")
    logger.info("Connect with query parameter: /ws?room=myroom")
    uvicorn.run(app, host=host, port=port, log_config=None)


def run_controller(host: str, port: int) -> None:
    from controller_app import create_controller_app, log_endpoints

    app = create_controller_app()
    logger.info(f"Control server listening on {host}:{port}")
    log_endpoints()
    uvicorn.run(app, host=host, port=port, log_config=None)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Signaling relay and process controller")
    subparsers = parser.add_subparsers(dest="component", required=True)

    signaling = subparsers.add_parser("signaling", help="run the room-based signaling relay")
    signaling.add_argument("--host", default=HOST)
    signaling.add_argument("--port", type=int, default=SIGNALING_PORT)

    controller = subparsers.add_parser("controller", help="run the process control plane")
    controller.add_argument("--host", default=HOST)
    controller.add_argument("--port", type=int, default=CONTROL_PORT)

    args = parser.parse_args(argv)
    if args.component == "signaling":
        run_signaling(args.host, args.port)
    else:
        run_controller(args.host, args.port)


if __name__ == "__main__":
    main()
