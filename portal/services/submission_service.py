"""Submission lifecycle: creation, listing, lookup and evaluation.

A submission is created once per (user, assessment) pair. The existence check
below only produces a friendlier error early; the ``uq_submission_user_assessment``
constraint is what actually keeps a racing second insert out.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from portal.core.config import MAX_GRADE, MIN_GRADE
from portal.core.errors import (
    AuthorizationError,
    DuplicateSubmission,
    InactiveAssessment,
    InvalidEvaluation,
    NotFoundError,
    ValidationError,
)
from portal.core.ids import parse_id
from portal.core.permissions import ensure_admin
from portal.core.principal import Principal
from portal.models.assessment import Assessment, Question
from portal.models.submission import (
    EVALUATION_EVALUATED,
    EVALUATION_PENDING,
    OPEN_CHALLENGE_STATUSES,
    Challenge,
    Submission,
)
from portal.services import assessment_service
from portal.services.scoring import compute_category_scores, normalize_selection

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _find_existing(db: Session, user_id: int, assessment_id: int) -> Optional[Submission]:
    return (
        db.query(Submission)
        .filter(Submission.user_id == user_id, Submission.assessment_id == assessment_id)
        .first()
    )


def _clean_mcq_responses(questions: List, mcq_responses: Optional[Dict[str, List[str]]]) -> Dict[str, List[str]]:
    if not mcq_responses:
        return {}

    mcq_indices = {str(i) for i, q in enumerate(questions) if q.is_mcq}
    cleaned: Dict[str, List[str]] = {}
    for key, selected in mcq_responses.items():
        if key not in mcq_indices:
            raise ValidationError(f"Answer key '{key}' does not match a multiple-choice question")
        cleaned[key] = normalize_selection(selected)
    return cleaned


def _clean_evaluator_notes(questions: List, evaluator_notes: Dict[str, str]) -> Dict[str, str]:
    question_ids = {str(q.id) for q in questions}
    cleaned: Dict[str, str] = {}
    for key, note in evaluator_notes.items():
        if str(key) not in question_ids:
            raise InvalidEvaluation(f"Note key '{key}' does not match a question of this assessment")
        cleaned[str(key)] = note
    return cleaned


def create_submission(
    db: Session,
    principal: Principal,
    assessment_id,
    content: Optional[str],
    tab_switches: Optional[int] = 0,
    mcq_responses: Optional[Dict[str, List[str]]] = None,
) -> Submission:
    assessment = assessment_service.get_by_id(db, assessment_id)

    if not assessment.is_active and not principal.is_admin:
        raise InactiveAssessment()

    if not content or not content.strip():
        raise ValidationError("Submission content is required")

    tab_switches = tab_switches or 0
    if tab_switches < 0:
        raise ValidationError("Tab switches cannot be negative")

    responses = _clean_mcq_responses(assessment.questions, mcq_responses)

    if _find_existing(db, principal.id, assessment.id) is not None:
        raise DuplicateSubmission()

    s = Submission(
        user_id=principal.id,
        assessment_id=assessment.id,
        content=content,
        mcq_responses=responses,
        # client-reported, stored as-is
        tab_switches=tab_switches,
        submitted_at=_utcnow(),
        evaluation_status=EVALUATION_PENDING,
        category_scores=compute_category_scores(assessment.questions, responses),
        evaluator_notes={},
    )
    db.add(s)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            "duplicate submission for user %s on assessment %s caught by constraint",
            principal.id,
            assessment.id,
        )
        raise DuplicateSubmission()

    db.refresh(s)
    logger.info(
        "submission %s created: user=%s assessment=%s tab_switches=%s",
        s.id,
        s.user_id,
        s.assessment_id,
        s.tab_switches,
    )
    return s


def _base_query(db: Session):
    return db.query(Submission).options(
        joinedload(Submission.assessment),
        joinedload(Submission.challenge),
    )


def list_for_user(db: Session, principal: Principal) -> List[Submission]:
    return (
        _base_query(db)
        .filter(Submission.user_id == principal.id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def list_all(db: Session, principal: Principal) -> List[Submission]:
    ensure_admin(principal, "Not authorized to access all submissions")
    return (
        _base_query(db)
        .options(joinedload(Submission.user))
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def list_for_assessment(db: Session, principal: Principal, assessment_id) -> List[Submission]:
    ensure_admin(principal, "Not authorized to access assessment submissions")
    assessment = assessment_service.get_by_id(db, assessment_id)
    return (
        _base_query(db)
        .options(joinedload(Submission.user))
        .filter(Submission.assessment_id == assessment.id)
        .order_by(Submission.submitted_at.desc(), Submission.id.desc())
        .all()
    )


def list_open_challenges(db: Session, principal: Principal) -> List[Submission]:
    ensure_admin(principal, "Not authorized to review challenges")
    return (
        _base_query(db)
        .options(joinedload(Submission.user))
        .join(Challenge, Challenge.submission_id == Submission.id)
        .filter(Challenge.status.in_(OPEN_CHALLENGE_STATUSES))
        .order_by(Challenge.challenge_date.asc())
        .all()
    )


def load_submission(db: Session, submission_id, *, for_update: bool = False) -> Submission:
    q = db.query(Submission).filter(Submission.id == parse_id(submission_id, "Submission"))
    if for_update:
        # row lock where the backend supports it (no-op on SQLite)
        q = q.with_for_update()
    s = q.first()
    if not s:
        raise NotFoundError("Submission not found")
    return s


def get_submission(db: Session, principal: Principal, submission_id) -> Submission:
    s = (
        db.query(Submission)
        .options(
            joinedload(Submission.assessment).joinedload(Assessment.questions).joinedload(Question.options),
            joinedload(Submission.challenge),
            joinedload(Submission.user),
        )
        .filter(Submission.id == parse_id(submission_id, "Submission"))
        .first()
    )
    if not s:
        raise NotFoundError("Submission not found")
    if not principal.is_admin and s.user_id != principal.id:
        raise AuthorizationError("Not authorized to view this submission")
    return s


def evaluate(
    db: Session,
    principal: Principal,
    submission_id,
    grade,
    feedback: Optional[str],
    evaluator_notes: Optional[Dict[str, str]] = None,
) -> Submission:
    """
    Record (or overwrite) the admin's grade.

    Re-grading is allowed and simply replaces grade, feedback and evaluated_at.
    The challenge record is left exactly as it is, so an accepted challenge is
    usually followed by a fresh evaluate call.
    """
    ensure_admin(principal, "Not authorized to evaluate submissions")

    if isinstance(grade, bool) or not isinstance(grade, int) or not MIN_GRADE <= grade <= MAX_GRADE:
        raise InvalidEvaluation(f"Grade must be an integer between {MIN_GRADE} and {MAX_GRADE}")
    if not feedback or not feedback.strip():
        raise InvalidEvaluation("Feedback is required")

    s = load_submission(db, submission_id, for_update=True)
    notes = None
    if evaluator_notes is not None:
        notes = _clean_evaluator_notes(s.assessment.questions, evaluator_notes)

    s.grade = grade
    s.feedback = feedback
    s.evaluation_status = EVALUATION_EVALUATED
    s.evaluated_at = _utcnow()
    if notes is not None:
        s.evaluator_notes = notes

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(s)
    logger.info("submission %s evaluated by user %s: grade=%s", s.id, principal.id, s.grade)
    return s
