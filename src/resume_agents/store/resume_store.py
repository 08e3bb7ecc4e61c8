"""Resume document persistence: one JSON document per user."""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path
from typing import Protocol

from resume_agents.models.resume import ResumeDocument

DEFAULT_DB_PATH = Path.home() / ".resume-agents" / "resumes.db"


class ResumeRepository(Protocol):
    def load_resume_document(self, user_id: str) -> ResumeDocument | None: ...

    def save_resume_document(self, user_id: str, doc: ResumeDocument) -> None: ...


class SQLiteResumeStore:
    """SQLite-backed resume store. Saves replace the whole document (last write wins)."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS resume_documents (
                    user_id TEXT PRIMARY KEY,
                    document_json TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
            """)

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def load_resume_document(self, user_id: str) -> ResumeDocument | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT document_json FROM resume_documents WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return ResumeDocument.model_validate_json(row[0])

    def save_resume_document(self, user_id: str, doc: ResumeDocument) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO resume_documents
                   (user_id, document_json, updated_at)
                   VALUES (?, ?, ?)""",
                (user_id, doc.model_dump_json(by_alias=True), time.time()),
            )

    def delete(self, user_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM resume_documents WHERE user_id = ?", (user_id,))

    def updated_at(self, user_id: str) -> float | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT updated_at FROM resume_documents WHERE user_id = ?",
                (user_id,),
            ).fetchone()
        return row[0] if row else None
