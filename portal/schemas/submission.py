from datetime import datetime
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from portal.schemas.assessment import AssessmentRead, AssessmentSummary, StudentAssessmentRead
from portal.schemas.user import UserRef

ChallengeOutcome = Literal["reviewing", "accepted", "rejected", "resolved"]


class SubmissionCreate(BaseModel):
    assessment_id: Union[int, str]
    content: str
    tab_switches: Optional[int] = 0
    mcq_responses: Optional[dict[str, list[str]]] = None


class SubmissionEvaluate(BaseModel):
    grade: int
    feedback: str
    evaluator_notes: Optional[dict[str, str]] = None


class ChallengeCreate(BaseModel):
    reason: str


class ChallengeRespond(BaseModel):
    response: str
    # explicit outcome; when omitted the "[Status: ...]" tag in the text is used
    status: Optional[ChallengeOutcome] = None


class ChallengeRead(BaseModel):
    status: str
    reason: str
    admin_response: Optional[str] = None
    challenge_date: datetime
    resolved_date: Optional[datetime] = None

    class Config:
        from_attributes = True


class SubmissionRead(BaseModel):
    id: int
    assessment_id: int
    user_id: int
    content: str
    mcq_responses: dict[str, list[str]] = Field(default_factory=dict)
    tab_switches: int
    submitted_at: datetime

    evaluation_status: str
    grade: Optional[int] = None
    feedback: Optional[str] = None
    evaluated_at: Optional[datetime] = None
    category_scores: dict[str, float] = Field(default_factory=dict)
    evaluator_notes: dict[str, str] = Field(default_factory=dict)

    challenge: Optional[ChallengeRead] = None
    assessment: Optional[AssessmentSummary] = None

    class Config:
        from_attributes = True


class SubmissionDetail(SubmissionRead):
    user: Optional[UserRef] = None


# get-by-id: the full question set, correctness only for admins
class SubmissionAdminView(SubmissionDetail):
    assessment: Optional[AssessmentRead] = None


class SubmissionStudentView(SubmissionDetail):
    assessment: Optional[StudentAssessmentRead] = None
