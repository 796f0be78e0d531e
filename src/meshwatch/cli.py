"""Command line entry point.

``meshwatch serve``      run the HTTP API with uvicorn
``meshwatch check``      verify a server is reachable and print the gateway URL
``meshwatch send-test``  post one room-firmware reading and show the response
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import socket
import sys
import time
from typing import Any

import uvicorn

from meshwatch.api.app import create_app
from meshwatch.client import MeshClient
from meshwatch.config import MeshConfig
from meshwatch.exceptions import MeshError, MeshTransportError

_logger = logging.getLogger(__name__)


def _local_ip() -> str:
    """Best-effort LAN address the gateway should target."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # No packet is sent; connect() on UDP only selects the outbound interface.
        sock.connect(("10.255.255.255", 1))
        return str(sock.getsockname()[0])
    except OSError:
        return "localhost"
    finally:
        sock.close()


def _server_url(args: argparse.Namespace, config: MeshConfig) -> str:
    if args.url:
        return str(args.url)
    return f"http://localhost:{config.port}"


def _cmd_serve(args: argparse.Namespace, config: MeshConfig) -> int:
    app = create_app(config)
    host = args.host or config.host
    port = args.port or config.port
    _logger.info("Gateway relay endpoint: http://%s:%d/api/readings/public/room", _local_ip(), port)
    uvicorn.run(app, host=host, port=port, log_level=args.log_level.lower())
    return 0


async def _check(url: str, config: MeshConfig) -> int:
    print("=== Server Connection Check ===")
    print(f"Local IP address : {_local_ip()}")
    async with MeshClient(url, api_key=config.api_key, access_token=config.access_token) as client:
        try:
            health = await client.health()
        except MeshTransportError as exc:
            print(f"Server is NOT reachable at {url}: {exc}")
            print("Start it with: meshwatch serve")
            return 1
    print(f"Server is running (version {health.get('version')}, {health.get('nodes')} live nodes)")
    print(f"Gateway should post to: http://{_local_ip()}:{config.port}/api/readings/public/room")
    return 0


async def _send_test(url: str, config: MeshConfig, room_id: int) -> int:
    payload: dict[str, Any] = {
        "room_id": room_id,
        "temperature": 25.5,
        "humidity": 60.0,
        "motion": 0,
        "rain": 0,
        "gas": 0,
        "ts": int(time.time() * 1000),
    }
    print(f"Sending: {json.dumps(payload)}")
    async with MeshClient(url, api_key=config.api_key, access_token=config.access_token) as client:
        try:
            response = await client.send_room(payload)
        except MeshTransportError as exc:
            print(f"ERROR: {exc}")
            return 1
    print(f"Response: {json.dumps(response, indent=2)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="meshwatch", description="Sensor mesh ingestion and presence service.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Bind address (default: MESH_HOST or 0.0.0.0)")
    serve.add_argument("--port", type=int, help="Bind port (default: MESH_PORT or 5000)")

    check = sub.add_parser("check", help="Check that a server is reachable")
    check.add_argument("--url", help="Server base URL (default: http://localhost:<MESH_PORT>)")

    send = sub.add_parser("send-test", help="Post one test reading via the room relay endpoint")
    send.add_argument("--url", help="Server base URL (default: http://localhost:<MESH_PORT>)")
    send.add_argument("--room-id", type=int, default=1, help="Room number (default: 1)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = MeshConfig.from_env()
    except MeshError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    if args.command == "serve":
        return _cmd_serve(args, config)
    if args.command == "check":
        return asyncio.run(_check(_server_url(args, config), config))
    if args.command == "send-test":
        return asyncio.run(_send_test(_server_url(args, config), config, args.room_id))
    return 2


if __name__ == "__main__":
    sys.exit(main())
