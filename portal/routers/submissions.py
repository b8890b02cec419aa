from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal.core.current_user import get_principal
from portal.core.deps import get_db
from portal.core.permissions import require_admin
from portal.core.principal import Principal
from portal.schemas.submission import (
    ChallengeCreate,
    ChallengeRespond,
    SubmissionAdminView,
    SubmissionCreate,
    SubmissionDetail,
    SubmissionEvaluate,
    SubmissionRead,
    SubmissionStudentView,
)
from portal.services import challenge_service, submission_service

router = APIRouter()


@router.post(
    "",
    response_model=SubmissionRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Assessment not found"},
        409: {"description": "Already submitted"},
    },
)
def create_submission(
    payload: SubmissionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return submission_service.create_submission(
        db,
        principal,
        payload.assessment_id,
        payload.content,
        payload.tab_switches,
        payload.mcq_responses,
    )


@router.get("/me", response_model=list[SubmissionRead])
def my_submissions(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return submission_service.list_for_user(db, principal)


@router.get("", response_model=list[SubmissionDetail])
def all_submissions(
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return submission_service.list_all(db, admin)


@router.get("/challenges", response_model=list[SubmissionDetail])
def open_challenges(
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return submission_service.list_open_challenges(db, admin)


@router.get("/assessment/{assessment_id}", response_model=list[SubmissionDetail])
def submissions_for_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return submission_service.list_for_assessment(db, admin, assessment_id)


@router.get("/{submission_id}", response_model=None)
def get_submission(
    submission_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    submission = submission_service.get_submission(db, principal, submission_id)
    # option correctness only goes to admins
    if principal.is_admin:
        return SubmissionAdminView.model_validate(submission)
    return SubmissionStudentView.model_validate(submission)


@router.put("/{submission_id}/evaluate", response_model=SubmissionDetail)
def evaluate_submission(
    submission_id: str,
    payload: SubmissionEvaluate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return submission_service.evaluate(
        db,
        admin,
        submission_id,
        payload.grade,
        payload.feedback,
        payload.evaluator_notes,
    )


@router.post("/{submission_id}/challenge", response_model=SubmissionDetail)
def file_challenge(
    submission_id: str,
    payload: ChallengeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return challenge_service.file_challenge(db, principal, submission_id, payload.reason)


@router.put("/{submission_id}/respond-challenge", response_model=SubmissionDetail)
def respond_to_challenge(
    submission_id: str,
    payload: ChallengeRespond,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return challenge_service.respond_to_challenge(
        db,
        admin,
        submission_id,
        payload.response,
        payload.status,
    )
