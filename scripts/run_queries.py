#!/usr/bin/env python3
"""
CLI script to run report queries through the access-scoped gateway.

Usage:
    # Local SQLite store, as a user of example.com
    python scripts/run_queries.py --email dev@example.com --q sites

    # Through the deployed API
    python scripts/run_queries.py --email dev@example.com --remote --q agents
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ai_docs_analytics.config import get_settings
from ai_docs_analytics.reporting import (
    QueryNotFoundError,
    UserIdentity,
    build_gateway,
    get_catalog,
)
from ai_docs_analytics.storage import StorageError, get_backend
from ai_docs_analytics.utils import setup_logging


def main():
    """Main entry point."""
    catalog = get_catalog()

    parser = argparse.ArgumentParser(
        description="Run analytics report queries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Coding-agent pages for one verified domain
  python scripts/run_queries.py --email me@example.com \\
      --verified-domain docs.other.dev --q pages

  # Output as JSON
  python scripts/run_queries.py --email me@example.com --q feed --json
        """,
    )

    parser.add_argument(
        "--email",
        help="Caller email (determines the allowed hosts)",
    )
    parser.add_argument(
        "--verified-domain",
        action="append",
        default=[],
        help="Domain the caller has verified (can specify multiple)",
    )
    parser.add_argument(
        "--q",
        default="default",
        help=f"Query template. Available: {', '.join(catalog.names())}",
    )
    parser.add_argument(
        "--host",
        help="Restrict to one host (must be within the allowed hosts)",
    )
    parser.add_argument(
        "--remote",
        action="store_true",
        help="Query the deployed API instead of the local SQLite store",
    )
    parser.add_argument(
        "--db-path",
        type=Path,
        help="Path to SQLite database (default: data/ai-docs-analytics.db)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    settings = get_settings()
    backend = None
    if not args.remote:
        kwargs = {}
        if args.db_path:
            kwargs["db_path"] = args.db_path
        backend = get_backend("sqlite", **kwargs)
        backend.initialize()

    identity = UserIdentity(
        email=args.email,
        verified_domains=tuple(args.verified_domain),
    )

    try:
        gateway = build_gateway(settings, backend=backend)
        rows = gateway.query(identity, args.q, args.host)
    except QueryNotFoundError as e:
        logger.error(str(e))
        return 2
    except StorageError as e:
        logger.error(f"Query failed: {e}")
        return 1
    finally:
        if backend is not None:
            backend.close()

    if args.json:
        print(json.dumps(rows, indent=2, default=str))
        return 0

    print()
    print(f"📊 Query: {args.q}")
    print("=" * 50)
    if args.host:
        print(f"  Host: {args.host}")
    print(f"  Rows: {len(rows)}")
    print()
    for row in rows:
        print(f"  {row}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
