from __future__ import annotations

from dataclasses import dataclass

from marketplace.data.users.user import ROLE_CUSTOMER, ROLE_EMPLOYEE


@dataclass(frozen=True)
class RequestIdentity:
    """
    Who is calling, scoped to a single request.

    Business operations receive this explicitly; nothing below the presentation layer
    reads flask_login.current_user.
    """
    user_id: int
    role: str

    @classmethod
    def from_user(cls, user) -> 'RequestIdentity':
        return cls(user_id=user.id, role=user.role)

    @property
    def is_employee(self) -> bool:
        return self.role == ROLE_EMPLOYEE

    @property
    def is_customer(self) -> bool:
        return self.role == ROLE_CUSTOMER
