#!/usr/bin/env python3
"""
DevConnector -- developer profiles and posts API.

Usage:
  python main.py
  python main.py --host 0.0.0.0 --port 5000
  python main.py --reload

Environment variables (see core/config.py for the full list):
  SECRET_KEY     Token signing key, at least 32 characters. Required unless DEBUG=true.
  DEBUG          true to auto-generate a SECRET_KEY for local development.
  DATABASE_URL   SQLAlchemy URL. Defaults to a SQLite file next to the code.
"""

import argparse

import uvicorn

from core.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Run the DevConnector API server.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port to listen on (default: 5000)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args()

    # Fail fast on a bad environment before uvicorn spawns workers.
    get_settings()

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
