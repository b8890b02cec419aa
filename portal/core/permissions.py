from fastapi import Depends

from portal.core.current_user import get_principal
from portal.core.errors import AuthorizationError
from portal.core.principal import Principal


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise AuthorizationError("Admin role required")
    return principal


def ensure_admin(principal: Principal, message: str = "Admin role required") -> None:
    if not principal.is_admin:
        raise AuthorizationError(message)
