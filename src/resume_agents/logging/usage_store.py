"""SQLite-backed usage log storage.

One row per billable unit of work: a pipeline run, a chat turn or a
section call. Rows are keyed by the log id, so re-saving a log replaces it.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from resume_agents.logging.models import UsageLog

DEFAULT_DB_PATH = Path.home() / ".resume-agents" / "usage.db"

_COLUMNS = tuple(UsageLog.model_fields)

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS usage_logs (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        mode TEXT NOT NULL,
        detail TEXT,
        elapsed_seconds REAL NOT NULL DEFAULT 0.0,
        total_input_tokens INTEGER NOT NULL DEFAULT 0,
        total_output_tokens INTEGER NOT NULL DEFAULT 0,
        call_count INTEGER NOT NULL DEFAULT 0,
        estimated_cost_usd REAL NOT NULL DEFAULT 0.0,
        success INTEGER NOT NULL DEFAULT 1,
        error_message TEXT
    );
    CREATE INDEX IF NOT EXISTS idx_usage_user_time ON usage_logs (user_id, timestamp);
"""


def _month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class UsageStore:
    """Usage logs for pipeline runs, chat turns and section calls."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.executescript(_SCHEMA)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        conn.row_factory = sqlite3.Row
        return conn

    def save_log(self, log: UsageLog) -> None:
        """Persist a usage log entry."""
        row = log.model_dump()
        row["timestamp"] = log.timestamp.isoformat()
        row["success"] = int(log.success)
        placeholders = ", ".join(f":{column}" for column in _COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO usage_logs ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                row,
            )

    def get_logs(
        self,
        user_id: str | None = None,
        mode: str | None = None,
        limit: int = 50,
    ) -> list[UsageLog]:
        """Newest-first usage logs, optionally narrowed to one user and/or mode."""
        where, params = self._filters(user_id=user_id, mode=mode)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT * FROM usage_logs{where} ORDER BY timestamp DESC LIMIT ?",
                (*params, limit),
            ).fetchall()
        return [
            UsageLog.model_validate({**dict(row), "success": bool(row["success"])})
            for row in rows
        ]

    def get_monthly_stats(self, user_id: str | None = None) -> dict:
        """Aggregate the current calendar month, for everyone or a single user.

        ``runs_by_mode`` counts pipeline runs, chat turns and section calls;
        ``top_details`` counts chat intents and section names, most frequent
        first.
        """
        now = datetime.now()
        where, params = self._filters(user_id=user_id, since=_month_start(now))
        with self._connect() as conn:
            totals = conn.execute(
                f"""SELECT
                        COUNT(*) AS runs,
                        COALESCE(SUM(total_input_tokens), 0) AS input_tokens,
                        COALESCE(SUM(total_output_tokens), 0) AS output_tokens,
                        COALESCE(SUM(call_count), 0) AS calls,
                        COALESCE(SUM(estimated_cost_usd), 0.0) AS cost,
                        COALESCE(SUM(success), 0) AS succeeded
                    FROM usage_logs{where}""",
                params,
            ).fetchone()
            by_mode = conn.execute(
                f"SELECT mode, COUNT(*) AS n FROM usage_logs{where} GROUP BY mode",
                params,
            ).fetchall()
            details = conn.execute(
                f"""SELECT detail, COUNT(*) AS n FROM usage_logs{where}
                    {"AND" if where else "WHERE"} detail IS NOT NULL
                    GROUP BY detail ORDER BY n DESC, detail""",
                params,
            ).fetchall()

        runs = totals["runs"]
        return {
            "total_runs": runs,
            "total_input_tokens": totals["input_tokens"],
            "total_output_tokens": totals["output_tokens"],
            "total_calls": totals["calls"],
            "total_cost_usd": totals["cost"],
            "success_rate": totals["succeeded"] / runs * 100 if runs else 0.0,
            "runs_by_mode": {row["mode"]: row["n"] for row in by_mode},
            "top_details": [(row["detail"], row["n"]) for row in details],
            "month": now.strftime("%Y-%m"),
        }

    def get_total_cost(self, user_id: str | None = None) -> float:
        """Estimated spend across all time."""
        where, params = self._filters(user_id=user_id)
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT COALESCE(SUM(estimated_cost_usd), 0.0) FROM usage_logs{where}",
                params,
            ).fetchone()
        return row[0]

    @staticmethod
    def _filters(
        user_id: str | None = None,
        mode: str | None = None,
        since: datetime | None = None,
    ) -> tuple[str, tuple]:
        clauses: list[str] = []
        params: list = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if mode is not None:
            clauses.append("mode = ?")
            params.append(mode)
        if since is not None:
            clauses.append("timestamp >= ?")
            params.append(since.isoformat())
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, tuple(params)
