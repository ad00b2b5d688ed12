"""
Sharing Domain

Handles expiring, password-gated shared objects: records, access control,
ownership checks and reclamation.
"""

from .access_gate import AccessGate, ServedObject
from .entities import RETENTION_WINDOW, AccessEvent, ShareObject, utcnow
from .ownership import AccessDecision, OwnershipGuard
from .password import PasswordHasher
from .repositories import ObjectRegistry
from .storage_repository import IObjectStore
from .sweeper import ReclamationSweeper, SweepReport
from .value_objects import InvalidObjectIdError, ObjectId

__all__ = [
    "AccessDecision",
    "AccessEvent",
    "AccessGate",
    "IObjectStore",
    "InvalidObjectIdError",
    "ObjectId",
    "ObjectRegistry",
    "OwnershipGuard",
    "PasswordHasher",
    "RETENTION_WINDOW",
    "ReclamationSweeper",
    "ServedObject",
    "ShareObject",
    "SweepReport",
    "utcnow",
]
