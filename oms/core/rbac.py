import enum

from fastapi import Depends, HTTPException, status

from oms.core.security import get_current_user
from oms.models.user import User


class Role(str, enum.Enum):
    EMPLOYEE = "employee"
    ADMIN = "admin"


def has_role(user: User, *roles: Role) -> bool:
    return Role(user.role) in roles


def is_admin(user: User) -> bool:
    return has_role(user, Role.ADMIN)


def require_roles(*required: Role):
    """
    Usage:
      Depends(require_roles(Role.ADMIN))
      Depends(require_roles(Role.ADMIN, Role.EMPLOYEE))  # any-of
    """
    required_set = set(required)

    def _dep(user: User = Depends(get_current_user)) -> User:
        if Role(user.role) not in required_set:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Access denied. Admin privileges required."
                if required_set == {Role.ADMIN}
                else f"Forbidden. Requires one of: {sorted(r.value for r in required_set)}",
            )
        return user

    return _dep
