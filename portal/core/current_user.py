from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from portal.core.deps import get_db
from portal.core.errors import AuthenticationError
from portal.core.principal import Principal
from portal.core.security import decode_access_token
from portal.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def authenticate(db: Session, token: str) -> User:
    claims = decode_access_token(token)
    if not claims or "sub" not in claims:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid or expired token")

    user = db.get(User, user_id)
    if not user:
        raise AuthenticationError("User no longer exists")
    return user


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthenticationError()
    return authenticate(db, credentials.credentials)


def get_principal(current_user: User = Depends(get_current_user)) -> Principal:
    return Principal(id=current_user.id, role=current_user.role)
