from __future__ import annotations

import asyncio
import sys

import uvicorn

from pos_checkout.adapters.inbound.cli import run_cli
from pos_checkout.bootstrap import build_cli_application
from pos_checkout.config import load_settings
from pos_checkout.logging_config import configure_logging


def main(argv: list[str] | None = None) -> int:
    argv = argv or sys.argv[1:]
    if not argv:
        print("usage: pos-checkout '<json>'  (or '-' to read stdin)")
        return 2

    raw = sys.stdin.read() if argv[0] == "-" else argv[0]

    settings = load_settings()
    configure_logging(settings.log_level, json=settings.log_json)
    app = build_cli_application(settings)
    return asyncio.run(run_cli(app.checkout, raw))


def serve() -> None:
    uvicorn.run(
        "pos_checkout.asgi:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
    )


if __name__ == "__main__":
    raise SystemExit(main())
