from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from portal.db.base_class import Base

QUESTION_DESCRIPTIVE = "descriptive"
QUESTION_MCQ = "mcq"


class Assessment(Base):
    __tablename__ = "assessments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    time_limit = Column(Integer, nullable=False, default=60)

    created_by = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    questions = relationship(
        "Question",
        back_populates="assessment",
        order_by="Question.position",
        cascade="all, delete-orphan",
    )
    submissions = relationship("Submission", back_populates="assessment")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    text = Column(Text, nullable=False)
    instructions = Column(Text, nullable=False, default="")
    max_points = Column(Integer, nullable=False, default=10)
    category_name = Column(String(100), nullable=True)
    type = Column(String(20), nullable=False, default=QUESTION_DESCRIPTIVE)

    assessment = relationship("Assessment", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.position",
        cascade="all, delete-orphan",
    )

    @property
    def is_mcq(self) -> bool:
        return self.type == QUESTION_MCQ

    @property
    def correct_options(self) -> set[str]:
        return {o.text for o in self.options if o.is_correct}

    @property
    def multiple_answers(self) -> bool:
        return len(self.correct_options) > 1


class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="options")
