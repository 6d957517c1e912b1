"""Command line entry point: ``gre serve`` and ``gre token``."""

from __future__ import annotations

import argparse
import logging
import sys
import threading
import time
import webbrowser

import requests

from GRE import token_store
from GRE.config import ConfigError, load_settings
from GRE.server import serve

logger = logging.getLogger(__name__)


def _wait_and_open_browser(url: str) -> None:
    """Wait for the server to become ready, then open the browser."""
    for _ in range(30):  # up to 30 seconds
        try:
            resp = requests.get(url, timeout=2)
            if resp.status_code == 200:
                webbrowser.open(url)
                return
        except requests.RequestException:
            pass
        time.sleep(1)
    logger.warning("Server at %s did not come up; not opening a browser", url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gre",
        description="Browse GitHub repositories through a lightweight proxy.",
    )
    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="run the HTTP server (default)")
    serve_parser.add_argument("--host", help="listen address (env: GRE_HOST)")
    serve_parser.add_argument("--port", type=int, help="listen port (env: GRE_PORT)")
    serve_parser.add_argument(
        "--open", action="store_true", help="open a browser tab once the server is up"
    )

    token_parser = sub.add_parser("token", help="manage the GitHub token in the OS keychain")
    token_sub = token_parser.add_subparsers(dest="action", required=True)
    set_parser = token_sub.add_parser("set", help="save a token")
    set_parser.add_argument("value")
    token_sub.add_parser("clear", help="delete the saved token")
    return parser


def _token_command(args: argparse.Namespace) -> int:
    if not token_store.is_available():
        print("The OS keychain is not available on this system.", file=sys.stderr)
        return 1
    if args.action == "set":
        if not token_store.save(args.value.strip()):
            print("Could not save the token.", file=sys.stderr)
            return 1
        print("Token saved.")
        return 0
    if token_store.delete():
        print("Token deleted.")
    else:
        print("No saved token.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "token":
        return _token_command(args)

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    if getattr(args, "host", None):
        settings.host = args.host
    if getattr(args, "port", None):
        settings.port = args.port

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.token is None:
        logger.info("No GitHub token configured; using unauthenticated rate limits")

    if getattr(args, "open", False):
        url = f"http://{settings.host}:{settings.port}/"
        threading.Thread(target=_wait_and_open_browser, args=(url,), daemon=True).start()

    try:
        serve(settings)
    except KeyboardInterrupt:
        logger.info("Shutting down")
    return 0


if __name__ == "__main__":
    sys.exit(main())
