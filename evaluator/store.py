from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from core.types import Answer, QuestionRecord

logger = logging.getLogger(__name__)


class RecordStore(Protocol):
    """Query surface the evaluation pipeline needs from a question store."""

    def find_by_category(self, category: str, limit: int) -> List[QuestionRecord]:
        ...

    def find_all_by_category(self, category: str) -> List[QuestionRecord]:
        ...

    def save_result(self, record: QuestionRecord) -> None:
        ...

    def reset_all(self) -> int:
        ...


class QuestionStore:
    """SQLite-backed store for evaluation questions and their results."""

    def __init__(self, path: str | Path = "questions.db", busy_timeout: float = 10.0):
        self.path = Path(path)
        self.busy_timeout = busy_timeout
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, timeout=self.busy_timeout)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        conn = self._connect()
        try:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS questions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    question TEXT NOT NULL,
                    option_a TEXT NOT NULL,
                    option_b TEXT NOT NULL,
                    option_c TEXT NOT NULL,
                    option_d TEXT NOT NULL,
                    category TEXT NOT NULL,
                    expected_answer TEXT NOT NULL,
                    observed_answer TEXT NOT NULL DEFAULT '',
                    response_latency_ms INTEGER
                );
                CREATE INDEX IF NOT EXISTS idx_questions_category ON questions (category);
                """
            )
            conn.commit()
        finally:
            conn.close()

    def insert_questions(self, records: Iterable[QuestionRecord]) -> List[int]:
        conn = self._connect()
        ids: List[int] = []
        try:
            for record in records:
                cursor = conn.execute(
                    """
                    INSERT INTO questions (
                        question, option_a, option_b, option_c, option_d,
                        category, expected_answer, observed_answer, response_latency_ms
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.question,
                        record.option_a,
                        record.option_b,
                        record.option_c,
                        record.option_d,
                        record.category,
                        record.expected_answer,
                        record.observed_answer.value,
                        record.response_latency_ms,
                    ),
                )
                ids.append(cursor.lastrowid)
            conn.commit()
        finally:
            conn.close()
        logger.info("Inserted %s questions into %s", len(ids), self.path)
        return ids

    def find_by_category(self, category: str, limit: int) -> List[QuestionRecord]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM questions WHERE category = ? ORDER BY id LIMIT ?",
                (category, limit),
            ).fetchall()
            return [self._row_to_record(row) for row in rows]
        finally:
            conn.close()

    def find_all_by_category(self, category: str) -> List[QuestionRecord]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM questions WHERE category = ? ORDER BY id",
                (category,),
            ).fetchall()
            return [self._row_to_record(row) for row in rows]
        finally:
            conn.close()

    def get(self, record_id: int) -> Optional[QuestionRecord]:
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM questions WHERE id = ?", (record_id,)).fetchone()
            return self._row_to_record(row) if row else None
        finally:
            conn.close()

    def save_result(self, record: QuestionRecord) -> None:
        """Persist the observed answer and latency of an existing record."""

        if record.id is None:
            raise ValueError("Cannot save the result of a record without an id.")
        logger.debug("Saving result for question %s", record.id)
        conn = self._connect()
        try:
            cursor = conn.execute(
                "UPDATE questions SET observed_answer = ?, response_latency_ms = ? WHERE id = ?",
                (record.observed_answer.value, record.response_latency_ms, record.id),
            )
            conn.commit()
        finally:
            conn.close()
        if cursor.rowcount == 0:
            raise LookupError(f"Question {record.id} does not exist.")

    def reset_all(self) -> int:
        conn = self._connect()
        try:
            cursor = conn.execute(
                "UPDATE questions SET observed_answer = '', response_latency_ms = NULL"
            )
            conn.commit()
        finally:
            conn.close()
        logger.info("Reset results on %s questions.", cursor.rowcount)
        return cursor.rowcount

    def count(self, category: Optional[str] = None) -> int:
        conn = self._connect()
        try:
            if category:
                row = conn.execute(
                    "SELECT COUNT(*) FROM questions WHERE category = ?", (category,)
                ).fetchone()
            else:
                row = conn.execute("SELECT COUNT(*) FROM questions").fetchone()
            return int(row[0])
        finally:
            conn.close()

    def categories(self) -> List[str]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT DISTINCT category FROM questions ORDER BY category").fetchall()
            return [row["category"] for row in rows]
        finally:
            conn.close()

    def _row_to_record(self, row: sqlite3.Row) -> QuestionRecord:
        return QuestionRecord(
            id=row["id"],
            question=row["question"],
            option_a=row["option_a"],
            option_b=row["option_b"],
            option_c=row["option_c"],
            option_d=row["option_d"],
            category=row["category"],
            expected_answer=row["expected_answer"],
            observed_answer=row["observed_answer"] or "",
            response_latency_ms=row["response_latency_ms"],
        )
