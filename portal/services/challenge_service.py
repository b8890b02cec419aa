"""Grade challenge workflow.

    none -> pending -> [reviewing ...] -> accepted | rejected | resolved

A student files at most one challenge per submission, and only after it has
been evaluated. Admins respond while the challenge is pending or reviewing;
any terminal status closes it for good. Accepting a challenge never changes
the grade: the admin re-evaluates separately.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from portal.core.errors import (
    AlreadyChallenged,
    AuthorizationError,
    NoPendingChallenge,
    ValidationError,
)
from portal.core.permissions import ensure_admin
from portal.core.principal import Principal
from portal.models.submission import (
    CHALLENGE_PENDING,
    CHALLENGE_REVIEWING,
    EVALUATION_EVALUATED,
    OPEN_CHALLENGE_STATUSES,
    TERMINAL_CHALLENGE_STATUSES,
    Challenge,
    Submission,
)
from portal.services.submission_service import load_submission

logger = logging.getLogger(__name__)

# admin UIs prefix the response with e.g. "[Status: ACCEPTED]"
STATUS_TAG_RE = re.compile(r"\[\s*status\s*:\s*(accepted|rejected|reviewing|resolved)\s*\]", re.IGNORECASE)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def status_from_response(response: str) -> str:
    """Outcome encoded in the response text; ``reviewing`` when no tag is present."""
    match = STATUS_TAG_RE.search(response or "")
    if not match:
        return CHALLENGE_REVIEWING
    return match.group(1).lower()


def file_challenge(db: Session, principal: Principal, submission_id, reason: Optional[str]) -> Submission:
    s = load_submission(db, submission_id, for_update=True)

    if s.user_id != principal.id:
        raise AuthorizationError("Not authorized to challenge this submission")
    if not reason or not reason.strip():
        raise ValidationError("Please provide a reason for the challenge")
    if s.evaluation_status != EVALUATION_EVALUATED:
        raise ValidationError("Only evaluated submissions can be challenged")
    if s.challenge is not None:
        raise AlreadyChallenged()

    s.challenge = Challenge(
        status=CHALLENGE_PENDING,
        reason=reason,
        challenge_date=_utcnow(),
    )

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("second challenge on submission %s caught by constraint", s.id)
        raise AlreadyChallenged()

    db.refresh(s)
    logger.info("challenge filed on submission %s by user %s", s.id, principal.id)
    return s


def respond_to_challenge(
    db: Session,
    principal: Principal,
    submission_id,
    response: Optional[str],
    status: Optional[str] = None,
) -> Submission:
    ensure_admin(principal, "Not authorized to respond to challenges")

    if not response or not response.strip():
        raise ValidationError("Please provide a response to the challenge")

    s = load_submission(db, submission_id, for_update=True)
    challenge = s.challenge
    if challenge is None or challenge.status not in OPEN_CHALLENGE_STATUSES:
        raise NoPendingChallenge()

    new_status = status or status_from_response(response)
    previous = challenge.status

    challenge.status = new_status
    # stored verbatim, tag included
    challenge.admin_response = response
    if new_status in TERMINAL_CHALLENGE_STATUSES:
        challenge.resolved_date = _utcnow()

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(s)
    logger.info(
        "challenge on submission %s: %s -> %s (admin %s)",
        s.id,
        previous,
        new_status,
        principal.id,
    )
    return s
