"""Persistence for generated reports."""

from research_council.errors import NotFoundError
from research_council.reports.models import Report
from research_council.storage.database import Database


class ReportStore:
    """Stores reports as JSON documents.

    Args:
        db: Shared document database.
    """

    def __init__(self, db: Database) -> None:
        self.db = db

    def add(self, report: Report) -> Report:
        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO reports (id, conversation_id, created_at, payload)
                VALUES (?, ?, ?, ?)
                """,
                (
                    report.id,
                    report.conversation_id,
                    report.created_at.isoformat(),
                    report.model_dump_json(),
                ),
            )
        return report

    def get(self, report_id: str) -> Report:
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT payload FROM reports WHERE id = ?", (report_id,)
            ).fetchone()
        if row is None:
            raise NotFoundError("Report", report_id)
        return Report.model_validate_json(row["payload"])

    def count_for_conversation(self, conversation_id: str) -> int:
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) AS n FROM reports WHERE conversation_id = ?",
                (conversation_id,),
            ).fetchone()
        return row["n"]

    def list_recent(
        self, conversation_id: str | None = None, limit: int = 50
    ) -> list[Report]:
        """Newest reports first, optionally for one conversation."""
        query = "SELECT payload FROM reports"
        params: list[object] = []
        if conversation_id:
            query += " WHERE conversation_id = ?"
            params.append(conversation_id)
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        params.append(limit)
        with self.db.connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [Report.model_validate_json(r["payload"]) for r in rows]
