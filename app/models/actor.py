from dataclasses import dataclass
from app.models.booking import Role

STAFF_ROLES = (Role.ADMIN, Role.STAFF)


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a booking operation."""

    user_id: int
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
