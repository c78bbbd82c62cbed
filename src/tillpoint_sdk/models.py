from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    CASHIER = "CASHIER"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class UserResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    username: str
    role: str | None = None
    branch_id: str | None = None
    is_active: bool | None = None

    def has_role(self, *roles: UserRole | str) -> bool:
        current = (self.role or "").upper()
        return any(current == (role.value if isinstance(role, UserRole) else str(role).upper()) for role in roles)
