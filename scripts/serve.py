"""Start the relay service with uvicorn.

The listen address is resolved once, before the app starts: ``HOST`` and
``PORT`` from the environment, moving to the next port when the requested
one is already taken.
"""

from __future__ import annotations

import os
import socket
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import uvicorn


def _port_free(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
        except OSError:
            return False
    return True


def resolve_port(host: str, port: int) -> int:
    if _port_free(host, port):
        return port
    print(f"Port {port} is busy, trying port {port + 1}...")
    if _port_free(host, port + 1):
        return port + 1
    raise SystemExit(f"Ports {port} and {port + 1} are both in use")


def main() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    try:
        port = int(os.getenv("PORT", "5000"))
    except ValueError:
        port = 5000
    port = resolve_port(host, port)
    print(f"Server running on http://{host}:{port}")
    print(f"Point the CLI at it with MOVIE_BOT_SERVER_URL=http://{host}:{port}")
    uvicorn.run("api.app:app", host=host, port=port)


if __name__ == "__main__":
    main()
