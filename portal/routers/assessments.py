from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from portal.core.current_user import get_principal
from portal.core.deps import get_db
from portal.core.permissions import require_admin
from portal.core.principal import Principal
from portal.schemas.assessment import (
    AssessmentCreate,
    AssessmentRead,
    AssessmentUpdate,
    StudentAssessmentRead,
)
from portal.services import assessment_service

router = APIRouter()


def _render(assessment, principal: Principal):
    # students get the question set without option correctness
    if principal.is_admin:
        return AssessmentRead.model_validate(assessment)
    return StudentAssessmentRead.model_validate(assessment)


@router.get("", response_model=None)
def list_assessments(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    assessments = assessment_service.list_assessments(db, active_only=not principal.is_admin)
    return [_render(a, principal) for a in assessments]


@router.post("", response_model=AssessmentRead, status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: AssessmentCreate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return assessment_service.create_assessment(db, admin, payload)


@router.get("/{assessment_id}", response_model=None)
def get_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
):
    return _render(assessment_service.get_for_principal(db, principal, assessment_id), principal)


@router.put("/{assessment_id}", response_model=AssessmentRead)
def update_assessment(
    assessment_id: str,
    payload: AssessmentUpdate,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return assessment_service.update_assessment(db, admin, assessment_id, payload)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    assessment_service.delete_assessment(db, admin, assessment_id)


@router.put("/{assessment_id}/activate", response_model=AssessmentRead)
def activate_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return assessment_service.set_active(db, admin, assessment_id, True)


@router.put("/{assessment_id}/deactivate", response_model=AssessmentRead)
def deactivate_assessment(
    assessment_id: str,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    return assessment_service.set_active(db, admin, assessment_id, False)
