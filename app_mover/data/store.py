"""Local data store — SQLite at ~/.app-mover/data.db."""

from __future__ import annotations

import os
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

DB_PATH_ENV = "APP_MOVER_DB"

_DEFAULT_DB_PATH = os.path.join(
    str(Path.home()), ".app-mover", "data.db"
)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS relocations (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    updated_at TEXT,
    source TEXT NOT NULL,
    destination TEXT,
    version TEXT,
    os_version TEXT,
    needs_auth INTEGER,
    attempts INTEGER DEFAULT 0,
    outcome TEXT,
    error_message TEXT
);

CREATE TABLE IF NOT EXISTS config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

INSERT OR IGNORE INTO config (key, value) VALUES ('name-strategy', 'bundle');
INSERT OR IGNORE INTO config (key, value) VALUES ('replace-newer', 'false');
INSERT OR IGNORE INTO config (key, value) VALUES ('dialog', 'terminal');
"""


class DataStore:
    """Local SQLite data store."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or os.environ.get(DB_PATH_ENV) or _DEFAULT_DB_PATH
        os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self) -> None:
        conn = self._get_conn()
        conn.executescript(_SCHEMA)
        conn.commit()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    # ── Config ───────────────────────────────────────────────────────

    def get_config(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT value FROM config WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_config(self, key: str, value: str) -> None:
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    # ── Relocations ──────────────────────────────────────────────────

    def create_relocation(
        self,
        relocation_id: str,
        source: str,
        version: Optional[str],
        os_version: str,
    ) -> None:
        conn = self._get_conn()
        conn.execute(
            """INSERT INTO relocations
               (id, created_at, source, version, os_version)
               VALUES (?, ?, ?, ?, ?)""",
            (
                relocation_id,
                datetime.now().isoformat(),
                source,
                version,
                os_version,
            ),
        )
        conn.commit()

    def complete_relocation(
        self,
        relocation_id: str,
        outcome: str,
        destination: Optional[str] = None,
        needs_auth: Optional[bool] = None,
        attempts: int = 0,
        error_message: Optional[str] = None,
    ) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE relocations SET
               updated_at = ?,
               outcome = ?,
               destination = ?,
               needs_auth = ?,
               attempts = ?,
               error_message = ?
               WHERE id = ?""",
            (
                datetime.now().isoformat(),
                outcome,
                destination,
                None if needs_auth is None else int(needs_auth),
                attempts,
                error_message,
                relocation_id,
            ),
        )
        conn.commit()

    def recent_relocations(self, limit: int = 20) -> list[dict[str, Any]]:
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM relocations
               ORDER BY created_at DESC, rowid DESC
               LIMIT ?""",
            (limit,),
        ).fetchall()
        return [dict(row) for row in rows]
