"""Caller identity handed to every order operation.

Authentication happens upstream; the core only receives an already resolved
user id and role and applies ownership rules with them.
"""

from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ValidationError


class Role(Enum):
    ADMIN = "Admin"
    MERCHANT = "Merchant"
    CUSTOMER = "Customer"


@dataclass(frozen=True)
class Requester:
    """The resolved identity of whoever issued a request."""

    user_id: str
    role: Role = Role.CUSTOMER

    @classmethod
    def of(cls, user_id, role=None) -> "Requester":
        """Build a requester from raw values, rejecting unknown roles."""
        if not user_id:
            raise ValidationError({"requester": ["An authenticated user is required"]})
        try:
            resolved = Role(role) if role else Role.CUSTOMER
        except ValueError:
            raise ValidationError({"role": [f"Unknown role: {role}"]}) from None
        return cls(user_id=str(user_id), role=resolved)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_merchant(self) -> bool:
        return self.role == Role.MERCHANT

    def owns(self, user_id) -> bool:
        return str(user_id) == self.user_id

    def can_access(self, user_id) -> bool:
        """Admins see everything; everyone else only what they own."""
        return self.is_admin or self.owns(user_id)
