from dataclasses import dataclass

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, passed explicitly into every service call."""

    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
