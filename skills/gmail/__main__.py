"""
Entry point for the Gmail skill.

Run with: python -m skills.gmail   (MCP stdio server)

Configuration comes from GMAIL_SKILL_* environment variables or a .env file.
"""

from __future__ import annotations

import asyncio
import logging
import sys

from .config import get_settings
from .server import run_server


def main() -> None:
  settings = get_settings()
  logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(name)s] %(levelname)s: %(message)s",
    stream=sys.stderr,
  )
  asyncio.run(run_server(settings))


if __name__ == "__main__":
  main()
