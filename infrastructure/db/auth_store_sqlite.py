from __future__ import annotations

import json
import sqlite3
from typing import Optional

from domain.models import AuthData
from domain.repositories import AuthStore


class SqliteAuthStore(AuthStore):
    """
    SQLite-backed implementation of `AuthStore`.

    Stores the wallet authorization record for each app key in a
    `wallet_auth` table; the key list is kept as a JSON array.
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
                CREATE TABLE IF NOT EXISTS wallet_auth (
                    app_key TEXT PRIMARY KEY,
                    account_id TEXT NOT NULL,
                    all_keys TEXT NOT NULL DEFAULT '[]'
                )
                """
            )
            conn.commit()

    @staticmethod
    def _to_domain(row: sqlite3.Row) -> AuthData:
        return AuthData(account_id=str(row[0]), all_keys=list(json.loads(row[1])))

    def get_auth_data(self, app_key: str) -> Optional[AuthData]:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT account_id, all_keys FROM wallet_auth WHERE app_key = ?",
                (app_key,),
            )
            row = cur.fetchone()
            if not row:
                return None
            return self._to_domain(row)

    def set_auth_data(self, app_key: str, auth_data: AuthData) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO wallet_auth (app_key, account_id, all_keys)
                VALUES (?, ?, ?)
                ON CONFLICT (app_key)
                DO UPDATE SET account_id = excluded.account_id,
                              all_keys = excluded.all_keys
                """,
                (app_key, auth_data.account_id, json.dumps(auth_data.all_keys)),
            )
            conn.commit()

    def clear_auth_data(self, app_key: str) -> None:
        with self._get_connection() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM wallet_auth WHERE app_key = ?", (app_key,))
            conn.commit()
