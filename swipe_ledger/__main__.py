#!/usr/bin/env python3
"""Command line entry point for Swipe Ledger"""

import argparse
import logging
import sys

from .config import get_config
from .events import EventPayload, OutcomeEvent
from .logging_config import setup_logging


def _print_outcome(event: EventPayload) -> None:
    data = event.data
    if event.event_type == OutcomeEvent.SWIPED:
        status = "duplicate" if data["duplicate"] else "recorded"
        print(f"{data['accountNumber']}: {status}")
    else:
        print(f"error: {data['error']}", file=sys.stderr)


def listen() -> int:
    """Capture swipes from the local keyboard until interrupted"""
    from .keyboard_listener import KeyboardListener
    from .service import LedgerService

    service = LedgerService()
    service.dispatcher.subscribe_all(_print_outcome)
    listener = KeyboardListener(service.controller)

    print(f"Writing to {service.get_ledger_path()}")
    print("Swipe cards now, Ctrl+C to stop")
    service.start_capture()
    listener.start()
    try:
        listener.join()
    except KeyboardInterrupt:
        pass
    finally:
        listener.stop()
        service.stop_capture()
    return 0


def serve(host: str, port: int) -> int:
    from .api import run_server
    run_server(host=host, port=port)
    return 0


def main(argv=None) -> int:
    config = get_config()
    parser = argparse.ArgumentParser(prog="swipe-ledger", description=__doc__)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=config.api_host)
    serve_parser.add_argument("--port", type=int, default=config.api_port)

    subparsers.add_parser("listen", help="Capture swipes from the keyboard")

    args = parser.parse_args(argv)
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)
    logging.getLogger("swipe_ledger").debug(f"Running command {args.command}")

    if args.command == "serve":
        return serve(args.host, args.port)
    return listen()


if __name__ == "__main__":
    sys.exit(main())
