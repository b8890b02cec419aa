from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, exists, func
from sqlalchemy.orm import column_property, relationship

from portal.db.base_class import Base
from portal.models.assessment import Assessment

EVALUATION_PENDING = "pending"
EVALUATION_EVALUATED = "evaluated"

CHALLENGE_PENDING = "pending"
CHALLENGE_REVIEWING = "reviewing"
CHALLENGE_ACCEPTED = "accepted"
CHALLENGE_REJECTED = "rejected"
CHALLENGE_RESOLVED = "resolved"

OPEN_CHALLENGE_STATUSES = (CHALLENGE_PENDING, CHALLENGE_REVIEWING)
TERMINAL_CHALLENGE_STATUSES = (CHALLENGE_ACCEPTED, CHALLENGE_REJECTED, CHALLENGE_RESOLVED)


class Submission(Base):
    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)

    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    content = Column(Text, nullable=False)
    # question index (as string) -> selected option texts
    mcq_responses = Column(JSON, nullable=False, default=dict)
    tab_switches = Column(Integer, nullable=False, default=0)

    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Evaluation fields (null until evaluated)
    evaluation_status = Column(String(20), nullable=False, default=EVALUATION_PENDING)
    grade = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    evaluated_at = Column(DateTime(timezone=True), nullable=True)
    category_scores = Column(JSON, nullable=False, default=dict)
    evaluator_notes = Column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("user_id", "assessment_id", name="uq_submission_user_assessment"),
    )

    assessment = relationship("Assessment", back_populates="submissions")
    user = relationship("User", back_populates="submissions")
    challenge = relationship("Challenge", back_populates="submission", uselist=False)


class Challenge(Base):
    __tablename__ = "challenges"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=CHALLENGE_PENDING)
    reason = Column(Text, nullable=False)
    admin_response = Column(Text, nullable=True)
    challenge_date = Column(DateTime(timezone=True), nullable=False)
    resolved_date = Column(DateTime(timezone=True), nullable=True)

    # a submission can only ever be challenged once
    __table_args__ = (
        UniqueConstraint("submission_id", name="uq_challenge_submission"),
    )

    submission = relationship("Submission", back_populates="challenge")


# loaded with the assessment row itself; the question set is locked once true
Assessment.has_submissions = column_property(
    exists().where(Submission.assessment_id == Assessment.id).correlate_except(Submission)
)
