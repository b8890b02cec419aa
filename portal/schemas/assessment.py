from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from portal.core.config import DEFAULT_MAX_POINTS, DEFAULT_TIME_LIMIT_MINUTES


class OptionIn(BaseModel):
    text: str
    is_correct: bool = False


class QuestionIn(BaseModel):
    text: str
    instructions: str = ""
    max_points: int = DEFAULT_MAX_POINTS
    category_name: Optional[str] = None
    type: Literal["descriptive", "mcq"] = "descriptive"
    options: list[OptionIn] = Field(default_factory=list)


class AssessmentCreate(BaseModel):
    title: str
    description: str
    questions: list[QuestionIn]
    time_limit: int = DEFAULT_TIME_LIMIT_MINUTES
    is_active: bool = True


class AssessmentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    questions: Optional[list[QuestionIn]] = None
    time_limit: Optional[int] = None
    is_active: Optional[bool] = None


# Admin read path: includes option correctness
class OptionRead(BaseModel):
    text: str
    is_correct: bool

    class Config:
        from_attributes = True


class QuestionRead(BaseModel):
    id: int
    position: int
    text: str
    instructions: str
    max_points: int
    category_name: Optional[str] = None
    type: str
    multiple_answers: bool = False
    options: list[OptionRead] = []

    class Config:
        from_attributes = True


class AssessmentRead(BaseModel):
    id: int
    title: str
    description: str
    is_active: bool
    time_limit: int
    created_by: Optional[int] = None
    created_at: datetime
    has_submissions: bool = False
    questions: list[QuestionRead] = []

    class Config:
        from_attributes = True


# Student read path: correctness never leaves the server
class StudentOptionRead(BaseModel):
    text: str

    class Config:
        from_attributes = True


class StudentQuestionRead(BaseModel):
    id: int
    position: int
    text: str
    instructions: str
    max_points: int
    category_name: Optional[str] = None
    type: str
    # lets the client choose toggles vs. exclusive choice
    multiple_answers: bool = False
    options: list[StudentOptionRead] = []

    class Config:
        from_attributes = True


class StudentAssessmentRead(BaseModel):
    id: int
    title: str
    description: str
    is_active: bool
    time_limit: int
    questions: list[StudentQuestionRead] = []

    class Config:
        from_attributes = True


class AssessmentSummary(BaseModel):
    id: int
    title: str
    description: str

    class Config:
        from_attributes = True
