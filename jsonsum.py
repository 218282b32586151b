import argparse
import asyncio
import json
import os
import sys

import httpx
from aiohttp import web

import jsonvalid
import sumapi

DEFAULT_PORT = 8080
DEFAULT_URL = f"http://localhost:{DEFAULT_PORT}/sum"

# Runs the server until cancelled. Cleanup happens in here so the runner is
# gone before the loop closes.
async def _serve(app, host, port):
    runner = web.AppRunner(app)
    await runner.setup()
    try:
        # An empty host listens on all interfaces
        site = web.TCPSite(runner, host or None, port)
        await site.start()
        print(f"Listening on {host or '*'}:{port}")
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()

def serve(host, port, **app_kwargs):
    """Runs the daemon with the provided address and app options"""
    app = sumapi.make_app(**app_kwargs)
    try:
        asyncio.run(_serve(app, host, port))
    except KeyboardInterrupt:
        pass

def _read_input(path):
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, mode="rb") as file:
        return file.read()

def check(paths, *, max_depth=jsonvalid.DEFAULT_MAX_DEPTH):
    """Validates local files, returning 1 if any of them is invalid"""
    status = 0
    for path in paths:
        data = _read_input(path)
        try:
            numbers = jsonvalid.validate(data, max_depth=max_depth)
        except jsonvalid.ParseError as e:
            print(f"{path}: {e}", file=sys.stderr)
            status = 1
            continue
        print(f"{path}: {json.dumps(numbers._asdict())}")
    return status

async def post_body(url, data, **client_kwargs):
    async with httpx.AsyncClient(**client_kwargs) as client:
        return await client.post(url, content=data)

def post(path, url):
    """Sends a file to a running daemon and prints its reply"""
    data = _read_input(path)
    try:
        response = asyncio.run(post_body(url, data))
    except httpx.HTTPError as error:
        print(f"Error: {error!r}", file=sys.stderr)
        return 1
    print(response.text)
    return 0 if response.is_success else 1

def make_parser(environ=None):
    """Returns the argument parser, with defaults taken from `environ`"""
    if environ is None:
        environ = os.environ
    parser = argparse.ArgumentParser(
        prog="jsonsum",
        description="Validates JSON and reports the numbers inside.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    daemon_parser = subparsers.add_parser("daemon", help="starts the daemon")
    daemon_parser.add_argument(
        "--host",
        default=environ.get("JSONSUM_HOST", ""),
        help="TCP address to listen on (default: all interfaces)",
    )
    daemon_parser.add_argument(
        "--port",
        type=int,
        default=environ.get("JSONSUM_PORT", str(DEFAULT_PORT)),
        help="TCP port to listen on",
    )
    daemon_parser.add_argument(
        "--max-body-size",
        type=int,
        default=environ.get("JSONSUM_MAX_BODY_SIZE", str(sumapi.DEFAULT_MAX_BODY_SIZE)),
        help="largest accepted request body in bytes",
    )

    check_parser = subparsers.add_parser("check", help="validates local files")
    check_parser.add_argument("files", nargs="+", help="files to validate (- for stdin)")

    for subparser in (daemon_parser, check_parser):
        subparser.add_argument(
            "--max-depth",
            type=int,
            default=environ.get("JSONSUM_MAX_DEPTH", str(jsonvalid.DEFAULT_MAX_DEPTH)),
            help="deepest allowed nesting of objects and arrays",
        )

    post_parser = subparsers.add_parser("post", help="sends a file to a running daemon")
    post_parser.add_argument("file", help="file to send (- for stdin)")
    post_parser.add_argument(
        "--url",
        default=environ.get("JSONSUM_URL", DEFAULT_URL),
        help="URL of the daemon's sum endpoint",
    )
    return parser

def main(argv=None):
    """Entry point for the jsonsum command"""
    args = make_parser().parse_args(argv)
    if args.command == "daemon":
        serve(
            args.host,
            args.port,
            max_depth=args.max_depth,
            max_body_size=args.max_body_size,
        )
        return 0
    if args.command == "check":
        return check(args.files, max_depth=args.max_depth)
    return post(args.file, args.url)

if __name__ == "__main__":
    sys.exit(main())
