from __future__ import annotations

import sqlite3
from typing import Optional

from domain.repositories import KeyStore


class SqliteKeyStore(KeyStore):
    """
    SQLite-backed implementation of `KeyStore`.

    Owns the `keys` table, one row per (network, account). Pending sign-in
    keys are stored under a synthetic account name by the wallet connection
    and live in the same table.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._ensure_table()

    def _get_connection(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_table(self) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS keys (
                    network_id TEXT NOT NULL,
                    account_id TEXT NOT NULL,
                    secret_key TEXT NOT NULL,
                    PRIMARY KEY (network_id, account_id)
                )
                """
            )
            conn.commit()

    def set_key(self, network_id: str, account_id: str, secret_key: str) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO keys (network_id, account_id, secret_key)
                VALUES (?, ?, ?)
                ON CONFLICT (network_id, account_id)
                DO UPDATE SET secret_key = excluded.secret_key
                """,
                (network_id, account_id, secret_key),
            )
            conn.commit()

    def get_key(self, network_id: str, account_id: str) -> Optional[str]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT secret_key FROM keys WHERE network_id = ? AND account_id = ?",
                (network_id, account_id),
            )
            row = cur.fetchone()
            if not row:
                return None
            return str(row[0])

    def remove_key(self, network_id: str, account_id: str) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM keys WHERE network_id = ? AND account_id = ?",
                (network_id, account_id),
            )
            conn.commit()
