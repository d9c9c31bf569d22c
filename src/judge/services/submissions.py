"""Submission store: one verdict per (user, problem)."""

import logging
from typing import Optional

from judge.db.models import Submission as SubmissionModel
from judge.db.models import utcnow
from judge.engine.outcomes import Verdict
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)

# Both support INSERT ... ON CONFLICT DO UPDATE keyed on unique_user_problem
UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class StoreWriteFailure(Exception):
    """The store rejected a verdict; the verdict is discarded."""


class SubmissionStore:
    """Persists the latest verdict for each (user, problem) pair."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_submission(
        self, user_id: int, problem_id: int
    ) -> Optional[SubmissionModel]:
        result = await self.db.execute(
            select(SubmissionModel).where(
                SubmissionModel.user_id == user_id,
                SubmissionModel.problem_id == problem_id,
            )
        )
        return result.scalar_one_or_none()

    async def upsert_verdict(
        self,
        user_id: int,
        problem_id: int,
        code: str,
        language: str,
        verdict: Verdict,
    ) -> SubmissionModel:
        """Insert or replace the user's submission for a problem in one transaction."""
        values = {
            "code": code,
            "language": language,
            "status": verdict.status.value,
            "points_earned": verdict.points_earned,
            "test_cases_passed": verdict.test_cases_passed,
            "total_test_cases": verdict.total_test_cases,
            "execution_time": verdict.execution_time,
            "submitted_at": utcnow(),
        }

        insert = UPSERT_DIALECTS[self.db.get_bind().dialect.name]
        stmt = (
            insert(SubmissionModel)
            .values(user_id=user_id, problem_id=problem_id, **values)
            .on_conflict_do_update(
                index_elements=["user_id", "problem_id"], set_=values
            )
            .returning(SubmissionModel)
            .execution_options(populate_existing=True)
        )

        try:
            result = await self.db.execute(stmt)
            submission = result.scalar_one()
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.error(
                "Failed to store verdict for user %s problem %s: %s",
                user_id, problem_id, exc,
            )
            raise StoreWriteFailure(str(exc)) from exc

        return submission
