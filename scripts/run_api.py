#!/usr/bin/env python3
"""
Run the analytics API with uvicorn.

Usage:
    # Local SQLite store on port 8787
    python scripts/run_api.py

    # Custom database and port
    python scripts/run_api.py --db-path /tmp/analytics.db --port 9000
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import uvicorn

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ai_docs_analytics.api import create_app
from ai_docs_analytics.config import get_settings
from ai_docs_analytics.utils import setup_logging


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run the analytics API")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8787, help="Bind port")
    parser.add_argument(
        "--db-path",
        type=Path,
        help="Path to SQLite database (overrides settings)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    level = logging.DEBUG if args.verbose else logging.INFO
    setup_logging(level=level)

    settings = get_settings()
    if args.db_path:
        settings = replace(settings, storage_backend="sqlite", sqlite_db_path=str(args.db_path))
        Path(settings.sqlite_db_path).parent.mkdir(parents=True, exist_ok=True)

    app = create_app(settings)
    uvicorn.run(app, host=args.host, port=args.port, log_level=logging.getLevelName(level).lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
