#!/usr/bin/env python3
"""
Classify a user-agent / accept header pair from the command line.

Usage:
    python scripts/classify_user_agent.py "claude-code/1.0.0"
    python scripts/classify_user_agent.py "curl/8.0" --accept text/markdown
    python scripts/classify_user_agent.py --list-agents coding-agent
"""

import argparse
import json
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ai_docs_analytics.config import VisitorCategory
from ai_docs_analytics.utils import (
    classify_dict,
    get_agent_names_by_category,
    is_page_view,
)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Classify a visitor")
    parser.add_argument("user_agent", nargs="?", default="", help="User-Agent header")
    parser.add_argument("--accept", default="text/html", help="Accept header")
    parser.add_argument("--host", default="", help="Request host")
    parser.add_argument(
        "--list-agents",
        choices=[c.value for c in VisitorCategory],
        help="List the named agents of a category and exit",
    )
    args = parser.parse_args()

    if args.list_agents:
        for name in get_agent_names_by_category(args.list_agents):
            print(name)
        return 0

    result = classify_dict(args.user_agent, args.accept, args.host)
    result["page_view"] = is_page_view(args.accept)
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
