import logging
from typing import List

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from portal.core.errors import AssessmentLocked, AuthorizationError, NotFoundError, ValidationError
from portal.core.ids import parse_id
from portal.core.permissions import ensure_admin
from portal.core.principal import Principal
from portal.models.assessment import QUESTION_MCQ, Assessment, Question, QuestionOption
from portal.models.submission import Submission
from portal.schemas.assessment import AssessmentCreate, AssessmentUpdate, QuestionIn

logger = logging.getLogger(__name__)


def get_by_id(db: Session, assessment_id) -> Assessment:
    a = db.get(Assessment, parse_id(assessment_id, "Assessment"))
    if not a:
        raise NotFoundError("Assessment not found")
    return a


def list_assessments(db: Session, *, active_only: bool) -> List[Assessment]:
    q = db.query(Assessment)
    if active_only:
        q = q.filter(Assessment.is_active.is_(True))
    return q.order_by(Assessment.created_at.desc(), Assessment.id.desc()).all()


def has_submissions(db: Session, assessment_id: int) -> bool:
    return db.scalar(select(exists().where(Submission.assessment_id == assessment_id))) or False


def get_for_principal(db: Session, principal: Principal, assessment_id) -> Assessment:
    a = get_by_id(db, assessment_id)
    if not principal.is_admin and not a.is_active:
        raise AuthorizationError("Not authorized to access this assessment")
    return a


def _validate_questions(questions: List[QuestionIn]) -> None:
    if not questions:
        raise ValidationError("An assessment needs at least one question")

    for index, q in enumerate(questions):
        label = f"Question {index + 1}"
        if not q.text.strip():
            raise ValidationError(f"{label}: text is required")
        if q.max_points < 0:
            raise ValidationError(f"{label}: max points cannot be negative")

        if q.type != QUESTION_MCQ:
            if q.options:
                raise ValidationError(f"{label}: only MCQ questions can have options")
            continue

        texts = [o.text.strip() for o in q.options]
        if len(texts) < 2:
            raise ValidationError(f"{label}: MCQ questions need at least two options")
        if any(not t for t in texts):
            raise ValidationError(f"{label}: option text is required")
        # responses are graded by option text
        if len(set(texts)) != len(texts):
            raise ValidationError(f"{label}: option texts must be unique")
        if not any(o.is_correct for o in q.options):
            raise ValidationError(f"{label}: mark at least one correct option")


def _build_questions(questions: List[QuestionIn]) -> List[Question]:
    built = []
    for position, q in enumerate(questions):
        built.append(
            Question(
                position=position,
                text=q.text,
                instructions=q.instructions,
                max_points=q.max_points,
                category_name=(q.category_name or None),
                type=q.type,
                options=[
                    QuestionOption(position=i, text=o.text.strip(), is_correct=o.is_correct)
                    for i, o in enumerate(q.options)
                ],
            )
        )
    return built


def create_assessment(db: Session, principal: Principal, payload: AssessmentCreate) -> Assessment:
    ensure_admin(principal, "Not authorized to create assessments")

    if not payload.title.strip() or not payload.description.strip():
        raise ValidationError("Please provide a title and a description")
    if payload.time_limit <= 0:
        raise ValidationError("Time limit must be positive")
    _validate_questions(payload.questions)

    a = Assessment(
        title=payload.title.strip(),
        description=payload.description,
        time_limit=payload.time_limit,
        is_active=payload.is_active,
        created_by=principal.id,
        questions=_build_questions(payload.questions),
    )
    db.add(a)
    db.commit()
    db.refresh(a)

    logger.info("assessment %s created by user %s", a.id, principal.id)
    return a


def update_assessment(db: Session, principal: Principal, assessment_id, payload: AssessmentUpdate) -> Assessment:
    ensure_admin(principal, "Not authorized to update this assessment")
    a = get_by_id(db, assessment_id)

    if payload.questions is not None:
        # question set is frozen once anyone has answered it
        if has_submissions(db, a.id):
            raise AssessmentLocked("Cannot modify questions for an assessment that already has submissions")
        _validate_questions(payload.questions)
        a.questions = _build_questions(payload.questions)

    if payload.title is not None:
        if not payload.title.strip():
            raise ValidationError("Title cannot be empty")
        a.title = payload.title.strip()
    if payload.description is not None:
        if not payload.description.strip():
            raise ValidationError("Description cannot be empty")
        a.description = payload.description
    if payload.time_limit is not None:
        if payload.time_limit <= 0:
            raise ValidationError("Time limit must be positive")
        a.time_limit = payload.time_limit
    if payload.is_active is not None:
        a.is_active = payload.is_active

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(a)
    logger.info("assessment %s updated by user %s", a.id, principal.id)
    return a


def delete_assessment(db: Session, principal: Principal, assessment_id) -> None:
    ensure_admin(principal, "Not authorized to delete this assessment")
    a = get_by_id(db, assessment_id)

    if has_submissions(db, a.id):
        raise AssessmentLocked("Cannot delete an assessment that already has submissions")

    db.delete(a)
    db.commit()
    logger.info("assessment %s deleted by user %s", a.id, principal.id)


def set_active(db: Session, principal: Principal, assessment_id, active: bool) -> Assessment:
    ensure_admin(principal, "Not authorized to update this assessment")
    a = get_by_id(db, assessment_id)

    a.is_active = active
    db.commit()
    db.refresh(a)

    logger.info("assessment %s %s by user %s", a.id, "activated" if active else "deactivated", principal.id)
    return a
