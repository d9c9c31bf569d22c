"""Problem and submission endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from judge.auth import get_current_user
from judge.config import Settings
from judge.db.base import get_db
from judge.db.models import Problem as ProblemModel
from judge.schemas.common import ErrorResponse, error_detail
from judge.schemas.problems import ProblemDetail, VisibleTestCase
from judge.schemas.submissions import (
    SubmissionCreate,
    SubmissionDetail,
    SubmissionResult,
)
from judge.services.judging import JudgingService, ProblemNotJudgeable
from judge.services.problems import (
    ProblemService,
    is_contest_open,
    visible_test_cases,
)
from judge.services.submissions import StoreWriteFailure, SubmissionStore

router = APIRouter()

ERROR_RESPONSES = {
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_judging_service(
    request: Request, db: AsyncSession = Depends(get_db)
) -> JudgingService:
    return JudgingService(
        db, runner=request.app.state.runner, settings=request.app.state.settings
    )


async def load_problem(problem_id: int, db: AsyncSession) -> ProblemModel:
    problem = None
    if problem_id > 0:
        problem = await ProblemService(db).get_problem(problem_id)
    if problem is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("PROBLEM_NOT_FOUND", "Problem not found"),
        )
    return problem


@router.get("/{problem_id}", response_model=ProblemDetail, responses=ERROR_RESPONSES)
async def get_problem(
    problem_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user),
) -> ProblemDetail:
    """Get a problem with its visible test cases."""
    problem = await load_problem(problem_id, db)
    return ProblemDetail(
        id=problem.id,
        contest_id=problem.contest_id,
        title=problem.title,
        description=problem.description,
        tags=problem.tags or [],
        points=problem.points,
        time_limit=problem.time_limit,
        memory_limit=problem.memory_limit,
        visible_test_cases=[
            VisibleTestCase.model_validate(case) for case in visible_test_cases(problem)
        ],
    )


@router.post(
    "/{problem_id}/submit",
    response_model=SubmissionResult,
    responses=ERROR_RESPONSES,
)
async def submit_solution(
    problem_id: int,
    submission: SubmissionCreate,
    db: AsyncSession = Depends(get_db),
    judging: JudgingService = Depends(get_judging_service),
    settings: Settings = Depends(get_app_settings),
    user_id: int = Depends(get_current_user),
) -> SubmissionResult:
    """Judge a solution synchronously and store it as the user's latest attempt."""
    if submission.language not in settings.runtimes:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=error_detail(
                "UNSUPPORTED_LANGUAGE",
                f"Language {submission.language!r} is not supported",
            ),
        )

    problem = await load_problem(problem_id, db)
    contest = problem.contest

    if contest.creator_id == user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail(
                "CREATOR_CANNOT_SUBMIT", "Contest creators cannot submit"
            ),
        )
    if not is_contest_open(contest):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_detail("CONTEST_NOT_ACTIVE", "Contest is not active"),
        )

    try:
        verdict = await judging.judge(
            user_id=user_id,
            problem=problem,
            code=submission.code,
            language=submission.language,
        )
    except ProblemNotJudgeable as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_detail("PROBLEM_NOT_JUDGEABLE", str(exc)),
        )
    except StoreWriteFailure:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_detail(
                "SUBMISSION_NOT_STORED", "Verdict could not be stored"
            ),
        )

    return SubmissionResult(
        problem_id=problem.id,
        status=verdict.status.value,
        points_earned=verdict.points_earned,
        test_cases_passed=verdict.test_cases_passed,
        total_test_cases=verdict.total_test_cases,
        execution_time=verdict.execution_time,
    )


@router.get(
    "/{problem_id}/submission",
    response_model=SubmissionDetail,
    responses=ERROR_RESPONSES,
)
async def get_my_submission(
    problem_id: int,
    db: AsyncSession = Depends(get_db),
    user_id: int = Depends(get_current_user),
) -> SubmissionDetail:
    """Get the caller's latest verdict for a problem."""
    submission = await SubmissionStore(db).get_submission(user_id, problem_id)
    if submission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=error_detail("SUBMISSION_NOT_FOUND", "No submission yet"),
        )
    return SubmissionDetail.model_validate(submission)
