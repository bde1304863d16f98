"""Run the API server.

    tabula-api                          # defaults from TABULA_* settings
    tabula-api --host 0.0.0.0 --port 9000
"""

from __future__ import annotations

import argparse

import uvicorn

from tabula_api.config import get_settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    p = argparse.ArgumentParser(description="Tabula table extraction API")
    p.add_argument("--host", default=settings.host, help="Bind host")
    p.add_argument("--port", type=int, default=settings.port, help="Bind port")
    p.add_argument("--reload", action="store_true", help="Reload on code changes")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    uvicorn.run("tabula_api.api.app:create_app", factory=True, host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
