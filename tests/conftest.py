"""
Pytest configuration and shared fixtures for the judge test suite.
"""

import json
import os
import sys
from datetime import datetime, timedelta, timezone

import jwt
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment before importing app
os.environ["JUDGE_ENVIRONMENT"] = "test"
os.environ["JUDGE_DB_URL"] = "sqlite+aiosqlite:///:memory:"
# Set test JWT secret for testing
os.environ["JUDGE_JWT_PUBLIC_KEY"] = "test-secret"
os.environ["JUDGE_JWT_ALGORITHM"] = "HS256"
# Disable rate limiting for tests
os.environ["JUDGE_RATE_LIMIT_REQUESTS"] = "999999"
# Run submissions with the interpreter running the tests
os.environ["JUDGE_RUNTIMES"] = json.dumps(
    {
        "python": {"command": [sys.executable], "suffix": ".py"},
        "javascript": {"command": ["node"], "suffix": ".js"},
    }
)

from judge.config import get_settings  # noqa: E402
from judge.db.base import Base  # noqa: E402
from judge.db.models import Contest, Problem, TestCase  # noqa: E402
from judge.engine.outcomes import JudgeProblem, JudgeTestCase, RunResult  # noqa: E402

settings = get_settings()

CREATOR_ID = 1
CONTESTANT_ID = 7


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session
        await session.rollback()


def build_problem(
    points: int = 30,
    time_limit: float = 2.0,
    memory_limit: int = 64 * 1024,
    cases=(("2", "4", False), ("5", "10", False), ("7", "14", True)),
    creator_id: int = CREATOR_ID,
    start_offset: timedelta = timedelta(hours=-1),
    end_offset: timedelta = timedelta(hours=1),
) -> Problem:
    """An unsaved problem inside a contest window relative to now."""
    now = datetime.now(timezone.utc)
    contest = Contest(
        creator_id=creator_id,
        title="Weekly Round",
        description="",
        start_time=now + start_offset,
        end_time=now + end_offset,
    )
    return Problem(
        contest=contest,
        title="Double It",
        description="Print twice the input number.",
        tags=["math"],
        points=points,
        time_limit=time_limit,
        memory_limit=memory_limit,
        test_cases=[
            TestCase(position=index, input=given, expected_output=expected, is_hidden=hidden)
            for index, (given, expected, hidden) in enumerate(cases)
        ],
    )


@pytest.fixture
def problem_factory():
    return build_problem


@pytest_asyncio.fixture
async def stored_problem(db_session):
    problem = build_problem()
    db_session.add(problem)
    await db_session.commit()
    await db_session.refresh(problem)
    return problem


@pytest.fixture
def judge_problem():
    """Engine-level problem factory."""

    def _make(cases, points: int = 30, time_limit: float = 1.0, output_limit: int = 1024):
        return JudgeProblem(
            id=1,
            time_limit=time_limit,
            output_limit=output_limit,
            points=points,
            test_cases=tuple(
                JudgeTestCase(input=given, expected_output=expected)
                for given, expected in cases
            ),
        )

    return _make


class ScriptedRunner:
    """Runner double that replays results (or raises failures) in order."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    async def run(self, code, language, input_text, time_limit, output_limit):
        self.calls.append(
            {
                "code": code,
                "language": language,
                "input": input_text,
                "time_limit": time_limit,
                "output_limit": output_limit,
            }
        )
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        if isinstance(result, str):
            return RunResult(stdout=result, elapsed_ms=len(self.calls))
        return result


@pytest.fixture
def scripted_runner():
    return ScriptedRunner


def make_token(user_id) -> str:
    payload = {
        "sub": str(user_id),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
        "iat": datetime.now(timezone.utc),
    }
    # Must match JUDGE_JWT_PUBLIC_KEY / JUDGE_JWT_ALGORITHM
    return jwt.encode(payload, "test-secret", algorithm="HS256")


@pytest.fixture
def token_for():
    """Token factory for arbitrary subjects."""
    return make_token


@pytest.fixture
def test_user_id():
    """Contestant user ID for authentication."""
    return CONTESTANT_ID


@pytest.fixture
def test_jwt_token(test_user_id):
    return make_token(test_user_id)


@pytest.fixture
def creator_jwt_token():
    return make_token(CREATOR_ID)


@pytest.fixture
def app():
    """Create test app instance with its own in-memory database."""
    from judge.server import create_app

    return create_app(get_settings())


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(client, test_jwt_token):
    """Create an authenticated test client."""
    client.headers = {"Authorization": f"Bearer {test_jwt_token}"}
    return client


@pytest.fixture
def run_in_app(app, client):
    """Run a coroutine function with a session on the app's event loop."""

    def _run(func):
        async def _call():
            async with app.state.database.session() as session:
                return await func(session)

        return client.portal.call(_call)

    return _run


@pytest.fixture
def seed_problem(run_in_app):
    """Store a problem through the app's database and return its ID."""

    def _seed(**kwargs) -> int:
        problem = build_problem(**kwargs)

        async def _add(session):
            session.add(problem)
            await session.flush()
            return problem.id

        return run_in_app(_add)

    return _seed
