from __future__ import annotations

import os
import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict


def _db_path() -> Path:
    path = os.getenv("MOVIE_BOT_DB_PATH")
    if path:
        return Path(path)
    # default under data/
    return Path(__file__).resolve().parents[1] / "data" / "metrics.sqlite"


_INITIALIZED: Dict[Path, bool] = {}
_INIT_LOCK = Lock()


def init_db(path: Path | None = None) -> None:
    db = (path or _db_path()).resolve()
    with _INIT_LOCK:
        if _INITIALIZED.get(db):
            return
        db.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(str(db), timeout=5) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS interactions (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  ts DATETIME DEFAULT CURRENT_TIMESTAMP,
                  status INTEGER,
                  error_kind TEXT,
                  latency_ms INTEGER,
                  message_chars INTEGER,
                  reply_chars INTEGER
                )
                """
            )
            conn.commit()
        _INITIALIZED[db] = True


def log_interaction(
    *,
    status: int,
    error_kind: str | None,
    latency_ms: int,
    message_chars: int,
    reply_chars: int,
    path: Path | None = None,
) -> None:
    """Record the outcome of one chat call. Message text is never stored."""
    db = (path or _db_path()).resolve()
    init_db(db)
    with sqlite3.connect(str(db), timeout=5) as conn:
        conn.execute(
            """
            INSERT INTO interactions(status, error_kind, latency_ms, message_chars, reply_chars)
            VALUES (?, ?, ?, ?, ?)
            """,
            (int(status), error_kind, int(latency_ms), int(message_chars), int(reply_chars)),
        )
        conn.commit()
