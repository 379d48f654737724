"""Role-based authorization decisions for account operations."""

from __future__ import annotations

from .account import Account


class AuthorizationPolicy:
    """Decides whether a resolved caller may act on account records.

    Every method is a pure function of its arguments: nothing is looked up and
    nothing is raised, so callers translate a ``False`` into the appropriate
    error themselves.
    """

    def can_update(self, caller: Account, target_account_id: str, target_email: str) -> bool:
        """Admins may update anyone; users may update only their own record."""
        if caller.is_admin:
            return True
        return caller.email == target_email

    def can_list_all(self, caller: Account) -> bool:
        return caller.is_admin

    def can_view_one(self, caller: Account) -> bool:
        # Single lookups are restricted the same way as the full listing.
        return caller.is_admin
