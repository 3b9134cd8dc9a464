import os
import sqlite3
from typing import Optional


class KeyStore:
    """
    Links a Discord user to their identity-provider session.

    Only the session id is stored; bearer tokens are short-lived and
    exchanged on every request, so they never touch the database.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._init_db()

    # -------------------------
    # Connection
    # -------------------------
    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)

        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS user_sessions (
                    user_id INTEGER PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    linked_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            con.commit()

    # -------------------------
    # Identity links
    # -------------------------
    def set_session(self, user_id: int, session_id: str) -> None:
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO user_sessions (user_id, session_id)
                VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    session_id=excluded.session_id,
                    linked_at=CURRENT_TIMESTAMP
                """,
                (int(user_id), session_id),
            )
            con.commit()

    def get_session(self, user_id: int) -> Optional[str]:
        with self._connect() as con:
            row = con.execute(
                "SELECT session_id FROM user_sessions WHERE user_id=?", (int(user_id),)
            ).fetchone()
            return row["session_id"] if row else None

    def delete_session(self, user_id: int) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM user_sessions WHERE user_id=?", (int(user_id),))
            con.commit()
