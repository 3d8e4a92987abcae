"""SQLite storage for languages, vocabulary, review cards and review logs."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from mneme.core.errors import NotFound, StoreUnavailable, ValidationFailed
from mneme.core.models import (
    CreateLanguageRequest,
    CreateVocabularyRequest,
    DueReview,
    Language,
    ReviewCard,
    VocabularyItem,
    as_utc,
    utcnow,
)
from mneme.core.validation import clean_language, clean_vocabulary

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 50

_ITEM_COLUMNS = (
    "v.id AS v_id, v.language_id AS v_language_id, v.word AS v_word, "
    "v.translation AS v_translation, v.pronunciation AS v_pronunciation, "
    "v.example_sentence AS v_example_sentence, "
    "v.difficulty_level AS v_difficulty_level, v.created_at AS v_created_at"
)


def _ts(value: datetime) -> str:
    """Serialize a timestamp so that lexical order matches time order."""
    return as_utc(value).isoformat(timespec="microseconds")


def _parse_ts(value: str | None) -> datetime | None:
    if value is None:
        return None
    return as_utc(datetime.fromisoformat(value))


def _row_to_language(row: sqlite3.Row) -> Language:
    return Language(
        id=row["id"],
        name=row["name"],
        code=row["code"],
        flag_emoji=row["flag_emoji"],
        created_at=_parse_ts(row["created_at"]),
    )


def _row_to_item(row: sqlite3.Row, prefix: str = "") -> VocabularyItem:
    return VocabularyItem(
        id=row[f"{prefix}id"],
        language_id=row[f"{prefix}language_id"],
        word=row[f"{prefix}word"],
        translation=row[f"{prefix}translation"],
        pronunciation=row[f"{prefix}pronunciation"],
        example_sentence=row[f"{prefix}example_sentence"],
        difficulty_level=row[f"{prefix}difficulty_level"],
        created_at=_parse_ts(row[f"{prefix}created_at"]),
    )


def _row_to_card(row: sqlite3.Row) -> ReviewCard:
    return ReviewCard(
        item_id=row["item_id"],
        ease_factor=row["ease_factor"],
        interval_days=row["interval_days"],
        repetitions=row["repetitions"],
        next_review=_parse_ts(row["next_review"]),
        last_reviewed=_parse_ts(row["last_reviewed"]),
        created_at=_parse_ts(row["created_at"]),
    )


class ReviewDatabase:
    """SQLite database holding content records and their scheduling state.

    Scheduling state lives in ``review_cards``, one row per vocabulary item,
    keyed by the item's id and joined with ``vocabulary`` at read time.
    Every public method runs in its own transaction.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS languages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    code TEXT NOT NULL UNIQUE,
                    flag_emoji TEXT NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS vocabulary (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    language_id INTEGER NOT NULL
                        REFERENCES languages(id) ON DELETE CASCADE,
                    word TEXT NOT NULL,
                    translation TEXT NOT NULL,
                    pronunciation TEXT,
                    example_sentence TEXT,
                    difficulty_level INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL
                );

                -- Scheduling state, owned by its vocabulary item
                CREATE TABLE IF NOT EXISTS review_cards (
                    item_id INTEGER PRIMARY KEY
                        REFERENCES vocabulary(id) ON DELETE CASCADE,
                    ease_factor REAL NOT NULL DEFAULT 2.5,
                    interval_days INTEGER NOT NULL DEFAULT 0,
                    repetitions INTEGER NOT NULL DEFAULT 0,
                    next_review TEXT NOT NULL,
                    last_reviewed TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                );

                -- Review log (append-only), removed with its vocabulary item
                CREATE TABLE IF NOT EXISTS review_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    item_id INTEGER NOT NULL
                        REFERENCES vocabulary(id) ON DELETE CASCADE,
                    reviewed_at TEXT NOT NULL,
                    quality INTEGER NOT NULL,
                    ease_before REAL,
                    ease_after REAL,
                    interval_before INTEGER,
                    interval_after INTEGER,
                    repetitions_before INTEGER,
                    repetitions_after INTEGER
                );

                CREATE INDEX IF NOT EXISTS idx_vocabulary_language_id
                    ON vocabulary(language_id);
                CREATE INDEX IF NOT EXISTS idx_review_cards_next_review
                    ON review_cards(next_review, item_id);
                CREATE INDEX IF NOT EXISTS idx_review_logs_item_id ON review_logs(item_id);
            """
            )
        logger.debug("Initialized review database at %s", self.db_path)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections.

        SQLite failures are re-raised as ``StoreUnavailable``, except
        constraint violations, which are input errors.
        """
        try:
            conn = sqlite3.connect(self.db_path)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            logger.error("Cannot open review database %s: %s", self.db_path, e)
            raise StoreUnavailable(f"Cannot open database {self.db_path}: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as e:
            conn.rollback()
            if "FOREIGN KEY" in str(e):
                raise ValidationFailed(f"Referenced record does not exist ({e})") from e
            raise ValidationFailed(f"A record with this value already exists ({e})") from e
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Review database operation failed: %s", e)
            raise StoreUnavailable(f"Database operation failed: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Languages
    # ------------------------------------------------------------------

    def create_language(
        self, req: CreateLanguageRequest, now: datetime | None = None
    ) -> Language:
        """Create a language after validating and trimming its fields."""
        req = clean_language(req)
        created_at = as_utc(now) if now else utcnow()
        with self._connection() as conn:
            cursor = conn.execute(
                "INSERT INTO languages (name, code, flag_emoji, created_at) VALUES (?, ?, ?, ?)",
                (req.name, req.code, req.flag_emoji, _ts(created_at)),
            )
            language_id = cursor.lastrowid
        return Language(id=language_id, created_at=created_at, **req.model_dump())

    def get_language(self, language_id: int) -> Language | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM languages WHERE id = ?", (language_id,)).fetchone()
            return _row_to_language(row) if row else None

    def list_languages(self) -> list[Language]:
        """List languages, newest first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM languages ORDER BY created_at DESC, id DESC"
            ).fetchall()
            return [_row_to_language(row) for row in rows]

    def delete_language(self, language_id: int) -> None:
        """Delete a language together with its vocabulary and their cards."""
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM languages WHERE id = ?", (language_id,))
            if cursor.rowcount == 0:
                raise NotFound("Language", language_id)

    # ------------------------------------------------------------------
    # Vocabulary
    # ------------------------------------------------------------------

    def create_vocabulary(
        self, req: CreateVocabularyRequest, now: datetime | None = None
    ) -> VocabularyItem:
        """Create a vocabulary item and its review card in one transaction.

        The new card is due at the creation time, so fresh material enters
        the review queue immediately.
        """
        req = clean_vocabulary(req)
        created_at = as_utc(now) if now else utcnow()
        with self._connection() as conn:
            exists = conn.execute(
                "SELECT 1 FROM languages WHERE id = ?", (req.language_id,)
            ).fetchone()
            if not exists:
                raise NotFound("Language", req.language_id)

            cursor = conn.execute(
                """
                INSERT INTO vocabulary (
                    language_id, word, translation, pronunciation,
                    example_sentence, difficulty_level, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    req.language_id,
                    req.word,
                    req.translation,
                    req.pronunciation,
                    req.example_sentence,
                    req.difficulty_level,
                    _ts(created_at),
                ),
            )
            item = VocabularyItem(id=cursor.lastrowid, created_at=created_at, **req.model_dump())
            self._upsert_card(conn, ReviewCard.initial(item.id, created_at))
        return item

    def get_vocabulary(self, item_id: int) -> VocabularyItem | None:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM vocabulary WHERE id = ?", (item_id,)).fetchone()
            return _row_to_item(row) if row else None

    def list_vocabulary(self, language_id: int) -> list[VocabularyItem]:
        """List a language's vocabulary, newest first."""
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM vocabulary
                WHERE language_id = ?
                ORDER BY created_at DESC, id DESC
            """,
                (language_id,),
            ).fetchall()
            return [_row_to_item(row) for row in rows]

    def search_vocabulary(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT
    ) -> list[VocabularyItem]:
        """Substring search over word, translation and example sentence."""
        query = query.strip()
        if not query or limit <= 0:
            return []

        pattern = f"%{query}%"
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM vocabulary
                WHERE word LIKE ? OR translation LIKE ? OR example_sentence LIKE ?
                ORDER BY word, id
                LIMIT ?
            """,
                (pattern, pattern, pattern, limit),
            ).fetchall()
            return [_row_to_item(row) for row in rows]

    def delete_vocabulary(self, item_id: int) -> None:
        """Delete a vocabulary item and its review card."""
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM vocabulary WHERE id = ?", (item_id,))
            if cursor.rowcount == 0:
                raise NotFound("Vocabulary item", item_id)

    # ------------------------------------------------------------------
    # Review cards
    # ------------------------------------------------------------------

    def get_card(self, item_id: int) -> ReviewCard | None:
        """Get the review card for a vocabulary item."""
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM review_cards WHERE item_id = ?", (item_id,)
            ).fetchone()
            return _row_to_card(row) if row else None

    def list_cards(self) -> list[ReviewCard]:
        with self._connection() as conn:
            rows = conn.execute("SELECT * FROM review_cards ORDER BY item_id").fetchall()
            return [_row_to_card(row) for row in rows]

    def put_card(self, card: ReviewCard) -> None:
        """Insert or update a review card."""
        with self._connection() as conn:
            self._upsert_card(conn, card)

    def _upsert_card(self, conn: sqlite3.Connection, card: ReviewCard) -> None:
        conn.execute(
            """
            INSERT INTO review_cards (
                item_id, ease_factor, interval_days, repetitions,
                next_review, last_reviewed, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
            ON CONFLICT(item_id) DO UPDATE SET
                ease_factor = excluded.ease_factor,
                interval_days = excluded.interval_days,
                repetitions = excluded.repetitions,
                next_review = excluded.next_review,
                last_reviewed = excluded.last_reviewed,
                updated_at = CURRENT_TIMESTAMP
        """,
            (
                card.item_id,
                card.ease_factor,
                card.interval_days,
                card.repetitions,
                _ts(card.next_review),
                _ts(card.last_reviewed) if card.last_reviewed else None,
                _ts(card.created_at),
            ),
        )

    def scan_due(self, now: datetime, limit: int) -> list[DueReview]:
        """Get due cards joined with their vocabulary.

        Most overdue first, ties broken by item id.
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        if limit == 0:
            return []

        with self._connection() as conn:
            rows = conn.execute(
                f"""
                SELECT c.*, {_ITEM_COLUMNS}
                FROM review_cards c
                JOIN vocabulary v ON v.id = c.item_id
                WHERE c.next_review <= ?
                ORDER BY c.next_review ASC, c.item_id ASC
                LIMIT ?
            """,
                (_ts(now), limit),
            ).fetchall()
            return [
                DueReview(card=_row_to_card(row), item=_row_to_item(row, prefix="v_"))
                for row in rows
            ]

    def save_review(self, before: ReviewCard, after: ReviewCard, quality: int) -> None:
        """Persist a reviewed card and append its log entry atomically."""
        with self._connection() as conn:
            self._upsert_card(conn, after)
            conn.execute(
                """
                INSERT INTO review_logs (
                    item_id, reviewed_at, quality, ease_before, ease_after,
                    interval_before, interval_after, repetitions_before, repetitions_after
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    after.item_id,
                    _ts(after.last_reviewed or utcnow()),
                    int(quality),
                    before.ease_factor,
                    after.ease_factor,
                    before.interval_days,
                    after.interval_days,
                    before.repetitions,
                    after.repetitions,
                ),
            )

    def get_review_logs(self, item_id: int) -> list[dict]:
        """Get the review history of one card, oldest first."""
        with self._connection() as conn:
            rows = conn.execute(
                "SELECT * FROM review_logs WHERE item_id = ? ORDER BY reviewed_at, id",
                (item_id,),
            ).fetchall()
            return [dict(row) for row in rows]

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_success_rate(self) -> float:
        """Get the fraction of reviews rated Good or Easy.

        Returns 0.0 if there are no reviews.
        """
        with self._connection() as conn:
            row = conn.execute(
                """
                SELECT
                    COUNT(*) as total,
                    SUM(CASE WHEN quality >= 3 THEN 1 ELSE 0 END) as passed
                FROM review_logs
                """
            ).fetchone()
            total = row["total"]
            if total == 0:
                return 0.0
            return row["passed"] / total

    def get_stats(self, now: datetime | None = None) -> dict:
        """Get review statistics."""
        now = now or utcnow()
        with self._connection() as conn:
            total_items = conn.execute("SELECT COUNT(*) FROM vocabulary").fetchone()[0]
            total_reviews = conn.execute("SELECT COUNT(*) FROM review_logs").fetchone()[0]
            due_now = conn.execute(
                "SELECT COUNT(*) FROM review_cards WHERE next_review <= ?", (_ts(now),)
            ).fetchone()[0]
            new_cards = conn.execute(
                "SELECT COUNT(*) FROM review_cards WHERE last_reviewed IS NULL"
            ).fetchone()[0]
            rows = conn.execute(
                """
                SELECT l.name AS name, COUNT(v.id) AS cnt
                FROM languages l
                LEFT JOIN vocabulary v ON v.language_id = l.id
                GROUP BY l.id
                ORDER BY l.name
                """
            ).fetchall()

        return {
            "total_items": total_items,
            "total_reviews": total_reviews,
            "due_now": due_now,
            "new_cards": new_cards,
            "success_rate": self.get_success_rate(),
            "by_language": {row["name"]: row["cnt"] for row in rows},
        }
