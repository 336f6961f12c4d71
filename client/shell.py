"""Chat session against the relay service.

``ChatShell`` keeps the in-memory message list and the server status for a
single session. A ``LivenessMonitor`` thread pings the relay on start and
then every ``ping_interval`` seconds until the session is closed.
"""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import requests

OFFLINE_TEXT = (
    "The server appears to be offline or not responding. "
    "Please check your connection and try again."
)
DEFAULT_ERROR_TEXT = "Sorry, I encountered an error. Please try again later."
LOADING_TEXT = "The AI model is currently loading. Please try again in a few moments."
RATE_LIMIT_TEXT = "Too many requests. Please wait a moment before trying again."
CONNECT_TEXT = (
    "Could not connect to the server. "
    "Please check your internet connection and try again."
)
UNEXPECTED_TEXT = "An unexpected error occurred. Please try again."


class ServerStatus(str, Enum):
    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass
class ChatMessage:
    text: str
    sender: str  # "user" | "bot"
    is_error: bool = False


def _server_url() -> str:
    return (os.getenv("MOVIE_BOT_SERVER_URL") or "http://127.0.0.1:5000").rstrip("/")


def error_text(resp: requests.Response) -> str:
    """Map a non-2xx relay response to the message shown to the user."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    if resp.status_code == 503:
        return LOADING_TEXT
    if resp.status_code == 429:
        return RATE_LIMIT_TEXT
    return DEFAULT_ERROR_TEXT


class LivenessMonitor:
    """Calls ``probe`` immediately and then every ``interval`` seconds."""

    def __init__(self, probe: Callable[[], object], interval: float = 30.0):
        self.probe = probe
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="liveness-probe", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set():
            self.probe()
            if self._stop.wait(self.interval):
                break

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


class ChatShell:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        session: requests.Session | None = None,
        ping_interval: float = 30.0,
        ping_timeout: float = 5.0,
        chat_timeout: float = 60.0,
    ):
        self.base_url = (base_url or _server_url()).rstrip("/")
        self.http = session or requests.Session()
        self.ping_timeout = ping_timeout
        self.chat_timeout = chat_timeout
        self.status = ServerStatus.CHECKING
        self.is_loading = False
        self.messages: List[ChatMessage] = []
        self._lock = threading.Lock()
        self._probe_lock = threading.Lock()
        self.monitor = LivenessMonitor(self.check_status, interval=ping_interval)

    # -- lifecycle
    def start(self) -> "ChatShell":
        self.monitor.start()
        return self

    def close(self) -> None:
        self.monitor.stop()
        self.http.close()

    def __enter__(self) -> "ChatShell":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.close()

    # -- state helpers
    def _add(self, msg: ChatMessage) -> ChatMessage:
        with self._lock:
            self.messages.append(msg)
        return msg

    def _add_offline_notice(self) -> None:
        with self._lock:
            if any(m.is_error and m.text == OFFLINE_TEXT for m in self.messages):
                return
            self.messages.append(ChatMessage(OFFLINE_TEXT, "bot", is_error=True))

    def can_send(self, text: str) -> bool:
        return bool(text.strip()) and not self.is_loading and self.status != ServerStatus.OFFLINE

    # -- liveness
    def _set_status(self, status: ServerStatus) -> None:
        with self._lock:
            self.status = status

    def check_status(self) -> ServerStatus:
        # One probe at a time; the monitor thread and retry_connection share self.http
        with self._probe_lock:
            try:
                resp = self.http.get(f"{self.base_url}/api/ping", timeout=self.ping_timeout)
                resp.raise_for_status()
            except requests.RequestException as e:
                print(f"[client] ping failed: {e}", file=sys.stderr)
                self._set_status(ServerStatus.OFFLINE)
                self._add_offline_notice()
            else:
                self._set_status(ServerStatus.ONLINE)
            return self.status

    def retry_connection(self) -> ServerStatus:
        self._set_status(ServerStatus.CHECKING)
        return self.check_status()

    # -- chat
    def send(self, text: str) -> Optional[ChatMessage]:
        """Submit one message; returns the bot reply (or error) message.

        Returns None without contacting the server when input is blank, a
        request is already in flight, or the server is offline.
        """
        if not self.can_send(text):
            return None
        self._add(ChatMessage(text, "user"))
        self.is_loading = True
        try:
            resp = self.http.post(
                f"{self.base_url}/api/chat",
                json={"message": text},
                timeout=self.chat_timeout,
            )
        except (requests.ConnectionError, requests.Timeout):
            self._set_status(ServerStatus.OFFLINE)
            return self._add(ChatMessage(CONNECT_TEXT, "bot", is_error=True))
        except requests.RequestException:
            return self._add(ChatMessage(UNEXPECTED_TEXT, "bot", is_error=True))
        finally:
            self.is_loading = False

        if not resp.ok:
            return self._add(ChatMessage(error_text(resp), "bot", is_error=True))
        try:
            reply = resp.json()["reply"]
        except (ValueError, KeyError, TypeError):
            return self._add(ChatMessage(UNEXPECTED_TEXT, "bot", is_error=True))
        return self._add(ChatMessage(str(reply), "bot"))
