"""Service for loading and saving study state to the database."""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from vocabdeck.config import settings
from vocabdeck.models.models import (
    CustomListRecord,
    CustomListWord,
    SrsIntervalRecord,
    StudySession,
    WordStatRecord,
)
from vocabdeck.models.srs_models import (
    CustomList,
    IntervalTable,
    StudyState,
    WordStat,
    format_date,
    parse_date,
)

logger = logging.getLogger(__name__)


class StateStore:
    """Durable store of study state, keyed by session."""

    def __init__(self, db: Session):
        """Initialize the store with a database session."""
        self.db = db

    def get_session(self, key: str) -> Optional[StudySession]:
        """Get a study session by its key."""
        return self.db.query(StudySession).filter(StudySession.key == key).first()

    def _get_or_create_session(self, key: str) -> StudySession:
        session = self.get_session(key)
        if not session:
            session = StudySession(key=key)
            self.db.add(session)
            self.db.flush()
            logger.info(f"Created study session {key!r}")
        return session

    def load(self, key: str) -> StudyState:
        """Load the state of a session, or a fresh state if it was never saved."""
        session = self.get_session(key)
        if not session:
            logger.info(f"No stored state for session {key!r}, starting fresh")
            return StudyState(srs_intervals=IntervalTable(settings.study.interval_table))

        word_stats = {
            record.word: WordStat(
                is_favorite=bool(record.is_favorite),
                correct_count=record.correct_count or 0,
                incorrect_count=record.incorrect_count or 0,
                srs_level=record.srs_level or 0,
                next_review=parse_date(record.next_review),
                last_reviewed=parse_date(record.last_reviewed),
                is_known=bool(record.is_known),
            )
            for record in self.db.query(WordStatRecord)
            .filter(WordStatRecord.session_id == session.id)
            .all()
        }

        custom_lists = [
            CustomList(name=record.name, words=[item.word for item in record.words])
            for record in self.db.query(CustomListRecord)
            .filter(CustomListRecord.session_id == session.id)
            .order_by(CustomListRecord.position)
            .all()
        ]

        interval_rows = (
            self.db.query(SrsIntervalRecord)
            .filter(SrsIntervalRecord.session_id == session.id)
            .all()
        )
        if interval_rows:
            intervals = IntervalTable({row.level: row.days for row in interval_rows})
        else:
            intervals = IntervalTable(settings.study.interval_table)

        logger.info(
            f"Loaded session {key!r}: {len(word_stats)} word stats, "
            f"{len(custom_lists)} custom lists"
        )
        return StudyState(
            word_stats=word_stats,
            custom_lists=custom_lists,
            srs_intervals=intervals,
        )

    def save(self, key: str, state: StudyState) -> None:
        """Replace the stored state of a session with the given one.

        Raises SQLAlchemyError after rolling back if the write fails.
        """
        try:
            session_id = self._get_or_create_session(key).id
            self._delete_session_rows(session_id)

            self.db.add_all(
                WordStatRecord(
                    session_id=session_id,
                    word=word,
                    is_favorite=stat.is_favorite,
                    correct_count=stat.correct_count,
                    incorrect_count=stat.incorrect_count,
                    srs_level=stat.srs_level,
                    next_review=format_date(stat.next_review),
                    last_reviewed=format_date(stat.last_reviewed),
                    is_known=stat.is_known,
                )
                for word, stat in state.word_stats.items()
            )
            for position, custom_list in enumerate(state.custom_lists):
                record = CustomListRecord(
                    session_id=session_id, name=custom_list.name, position=position
                )
                record.words = [
                    CustomListWord(word=word, position=index)
                    for index, word in enumerate(custom_list.words)
                ]
                self.db.add(record)
            self.db.add_all(
                SrsIntervalRecord(session_id=session_id, level=level, days=days)
                for level, days in state.srs_intervals.items()
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.debug(f"Saved session {key!r}")

    def _delete_session_rows(self, session_id: int) -> None:
        list_ids = select(CustomListRecord.id).where(CustomListRecord.session_id == session_id)
        self.db.query(CustomListWord).filter(
            CustomListWord.list_id.in_(list_ids)
        ).delete(synchronize_session="fetch")
        self.db.query(CustomListRecord).filter(
            CustomListRecord.session_id == session_id
        ).delete(synchronize_session="fetch")
        self.db.query(WordStatRecord).filter(
            WordStatRecord.session_id == session_id
        ).delete(synchronize_session="fetch")
        self.db.query(SrsIntervalRecord).filter(
            SrsIntervalRecord.session_id == session_id
        ).delete(synchronize_session="fetch")
        self.db.flush()
