from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Ensure project path for local imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from client.shell import ChatShell, ServerStatus


HELP_TEXT = (
    "Commands: /help, /status, /retry, /quit\n"
    "Examples: 'Who directed Inception?', 'List the crime movies'"
)

WELCOME = "Hello! I'm your movie expert chatbot. Ask me anything about the movies in my database!"


def _print_new(shell: ChatShell, seen: int) -> int:
    for msg in shell.messages[seen:]:
        if msg.sender == "user":
            continue
        prefix = "! " if msg.is_error else ""
        print(f"{prefix}{msg.text}")
    return len(shell.messages)


def interactive_loop(shell: ChatShell) -> None:
    print(WELCOME)
    print("Type /help for commands.")
    seen = 0
    while True:
        seen = _print_new(shell, seen)
        try:
            text = input("> ")
        except EOFError:
            print()
            break
        if not text.strip():
            continue
        low = text.strip().lower()

        if low in {"/quit", "/exit"}:
            break
        if low == "/help":
            print(HELP_TEXT)
            continue
        if low == "/status":
            print("Server:", shell.status.value)
            continue
        if low == "/retry":
            print("Server:", shell.retry_connection().value)
            continue

        if shell.status == ServerStatus.OFFLINE:
            print("Server Offline. Use /retry to reconnect.")
            continue
        shell.send(text)


def main() -> None:
    with ChatShell() as shell:
        print("🎬 Kino GPT connected to", shell.base_url)
        interactive_loop(shell)


if __name__ == "__main__":
    main()
