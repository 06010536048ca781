#!/usr/bin/env python3
"""
Finance Tracker Entry Point

Starts the FastAPI server with the storage backend, host and port taken from
FINTRACK_* environment variables (or a .env file).
"""

import sys

from finance_tracker.api import run_server
from finance_tracker.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("Starting Finance Tracker...")
    print(f"Storage backend: {config.storage_backend}")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\nShutting down Finance Tracker...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
