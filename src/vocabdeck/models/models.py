"""Database models for persisted study state."""
from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from vocabdeck.models.base import Base, TimestampMixin


class StudySession(Base, TimestampMixin):
    """A named study session owning its stats, lists and intervals."""

    __tablename__ = "study_sessions"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String, unique=True, nullable=False)

    # Relationships
    word_stats = relationship(
        "WordStatRecord", back_populates="session", cascade="all, delete-orphan"
    )
    custom_lists = relationship(
        "CustomListRecord",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="CustomListRecord.position",
    )
    intervals = relationship(
        "SrsIntervalRecord",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="SrsIntervalRecord.level",
    )


class WordStatRecord(Base, TimestampMixin):
    """Per-word study statistics."""

    __tablename__ = "word_stats"
    __table_args__ = (UniqueConstraint("session_id", "word"),)

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("study_sessions.id"), nullable=False)
    word = Column(String, nullable=False)
    is_favorite = Column(Boolean, default=False)
    correct_count = Column(Integer, default=0)
    incorrect_count = Column(Integer, default=0)
    srs_level = Column(Integer, default=0)
    next_review = Column(String(10))  # YYYY-MM-DD
    last_reviewed = Column(String(10))  # YYYY-MM-DD
    is_known = Column(Boolean, default=False)

    # Relationships
    session = relationship("StudySession", back_populates="word_stats")


class CustomListRecord(Base, TimestampMixin):
    """User-defined word list."""

    __tablename__ = "custom_lists"
    __table_args__ = (UniqueConstraint("session_id", "name"),)

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("study_sessions.id"), nullable=False)
    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    session = relationship("StudySession", back_populates="custom_lists")
    words = relationship(
        "CustomListWord",
        back_populates="custom_list",
        cascade="all, delete-orphan",
        order_by="CustomListWord.position",
    )


class CustomListWord(Base, TimestampMixin):
    """Word membership in a custom list."""

    __tablename__ = "custom_list_words"

    id = Column(Integer, primary_key=True)
    list_id = Column(Integer, ForeignKey("custom_lists.id"), nullable=False)
    word = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    custom_list = relationship("CustomListRecord", back_populates="words")


class SrsIntervalRecord(Base, TimestampMixin):
    """One row of a session's interval table."""

    __tablename__ = "srs_intervals"
    __table_args__ = (UniqueConstraint("session_id", "level"),)

    id = Column(Integer, primary_key=True)
    session_id = Column(Integer, ForeignKey("study_sessions.id"), nullable=False)
    level = Column(Integer, nullable=False)
    days = Column(Integer, nullable=False)

    # Relationships
    session = relationship("StudySession", back_populates="intervals")
