"""Command-line launcher: ``python -m docflow`` or the ``docflow`` script."""

from __future__ import annotations

import argparse

import uvicorn

from .config import PROJECT_ROOT, get_settings
from .utils.logging import configure_logging

APP_PATH = "docflow.main:app"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="docflow", description=__doc__)
    parser.add_argument("--host", default=settings.host, help="Interface to bind.")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to bind.")
    parser.add_argument(
        "--log-level", default=settings.log_level, help="Log level passed to Uvicorn."
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when files under docflow/ change.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)
    uvicorn.run(
        APP_PATH,
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
        reload_dirs=[str(PROJECT_ROOT / "docflow")] if args.reload else None,
    )


if __name__ == "__main__":
    main()
