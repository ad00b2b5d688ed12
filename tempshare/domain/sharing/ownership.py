"""
Ownership Guard

Authorizes mutating operations on shared objects.
"""

from enum import Enum

from tempshare.domain.errors import ForbiddenError

from .entities import ShareObject


class AccessDecision(Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


class OwnershipGuard:
    """Allows deletes by the owner of a record or by an administrator."""

    def authorize_delete(self, record: ShareObject, caller_id: str,
                         caller_is_admin: bool) -> AccessDecision:
        if caller_is_admin:
            return AccessDecision.ALLOWED
        if caller_id is not None and str(caller_id) == record.owner_id:
            return AccessDecision.ALLOWED
        return AccessDecision.DENIED

    def ensure_can_delete(self, record: ShareObject, caller_id: str,
                          caller_is_admin: bool) -> None:
        """
        Raise unless the caller may delete the record.

        Raises:
            ForbiddenError: If the decision is DENIED
        """
        decision = self.authorize_delete(record, caller_id, caller_is_admin)
        if decision is AccessDecision.DENIED:
            raise ForbiddenError(
                f"Caller {caller_id} may not delete object {record.object_id[:8]}"
            )
