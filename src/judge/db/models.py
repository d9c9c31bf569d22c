"""SQLAlchemy ORM models."""

from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Boolean, Text,
    ForeignKey, Index, CheckConstraint, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.types import JSON

from judge.db.base import Base

# JSONB for Postgres with JSON fallback
JSONType = JSON().with_variant(JSONB, "postgresql")

SUBMISSION_STATUSES = (
    "accepted",
    "wrong_answer",
    "runtime_error",
    "time_limit_exceeded",
    "output_limit_exceeded",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contest(Base):
    """Contest model; submissions are only judged inside its window."""
    __tablename__ = "contests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    problems = relationship("Problem", back_populates="contest")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="check_contest_window"),
        Index("idx_contests_creator", "creator_id"),
    )


class Problem(Base):
    """Problem model."""
    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contest_id = Column(Integer, ForeignKey("contests.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default="")
    tags = Column(JSONType, nullable=False, default=list)
    points = Column(Integer, nullable=False, default=100)
    time_limit = Column(Float, nullable=False, default=2.0)  # seconds
    memory_limit = Column(Integer, nullable=False, default=1024 * 1024)  # output bytes

    # Relationships
    contest = relationship("Contest", back_populates="problems", lazy="selectin")
    test_cases = relationship(
        "TestCase",
        back_populates="problem",
        order_by="TestCase.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("points >= 0", name="check_points"),
        CheckConstraint("time_limit > 0", name="check_time_limit"),
        CheckConstraint("memory_limit > 0", name="check_memory_limit"),
        Index("idx_problems_contest", "contest_id"),
    )


class TestCase(Base):
    """Test case model; hidden cases are used for judging only."""
    __tablename__ = "test_cases"
    id = Column(Integer, primary_key=True, autoincrement=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    input = Column(Text, nullable=False)
    expected_output = Column(Text, nullable=False)
    is_hidden = Column(Boolean, nullable=False, default=False)

    # Relationships
    problem = relationship("Problem", back_populates="test_cases")

    __table_args__ = (
        Index("idx_test_cases_problem", "problem_id", "position"),
    )


class Submission(Base):
    """Latest judged attempt of a user on a problem."""
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)
    code = Column(Text, nullable=False)
    language = Column(String, nullable=False)
    status = Column(String, nullable=False)
    points_earned = Column(Integer, nullable=False, default=0)
    test_cases_passed = Column(Integer, nullable=False, default=0)
    total_test_cases = Column(Integer, nullable=False, default=0)
    execution_time = Column(Integer, nullable=True)  # ms
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "problem_id", name="unique_user_problem"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in SUBMISSION_STATUSES) + ")",
            name="check_submission_status",
        ),
        CheckConstraint(
            "test_cases_passed >= 0 AND test_cases_passed <= total_test_cases",
            name="check_test_cases_passed",
        ),
        CheckConstraint("points_earned >= 0", name="check_points_earned"),
        Index("idx_submissions_problem", "problem_id"),
    )
