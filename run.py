#!/usr/bin/env python3
"""
Swipe Ledger Entry Point

Starts the FastAPI server for the swipe ledger.
"""

import sys

from swipe_ledger.api import run_server
from swipe_ledger.config import get_config
from swipe_ledger.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    setup_logging(config.log_level, log_format=config.log_format, log_file=config.log_file)

    print("Starting Swipe Ledger...")
    print(f"API available at: http://{config.api_host}:{config.api_port}")
    print(f"Documentation at: http://{config.api_host}:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Swipe Ledger...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
