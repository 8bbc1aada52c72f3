"""
Run the files manager API with uvicorn.

Usage:
  python -m files_manager [--host 0.0.0.0] [--port 5000] [--in-memory]
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from files_manager.app import create_app
from files_manager.config import get_settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Files manager API server")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (default: PORT)")
    parser.add_argument(
        "--in-memory",
        action="store_true",
        help="Use in-memory stores instead of MongoDB/Redis",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    settings = get_settings()
    if args.in_memory:
        settings = settings.model_copy(update={"use_in_memory_backends": True})

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
