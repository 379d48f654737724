from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .errors import ValidationError

MIN_FIRST_NAME_LENGTH = 2


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


@dataclass(slots=True)
class Account:
    """Aggregate root for a registered person and their credentials."""

    account_id: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    mobile_number: str
    role: Role = Role.USER
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def validate_names(first_name: str, last_name: str) -> tuple[str, str]:
    """Return the trimmed display names or raise ``ValidationError``."""
    first = (first_name or "").strip()
    last = (last_name or "").strip()
    errors: dict[str, str] = {}
    if len(first) < MIN_FIRST_NAME_LENGTH:
        errors["firstName"] = "First name must be at least 2 characters"
    if not last:
        errors["lastName"] = "Last name must not be blank"
    if errors:
        raise ValidationError("Validation failed", details=errors)
    return first, last
