"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - MessageId and OwnerId wrap primitives — never pass bare UUID/str in domain logic
    - All valid states encoded as Enums — no raw string matching
    - DESTROYED is a logical state only: a destroyed message is a deleted row

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (API responses are JSON)
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

MessageId = NewType("MessageId", UUID)
OwnerId = NewType("OwnerId", str)


# ─── Enums ───────────────────────────────────────────────────────

class MessageStatus(str, Enum):
    """Message lifecycle states — maps to DB `status` column (except DESTROYED)."""
    ACTIVE = "active"
    EXPIRED = "expired"
    DESTROYED = "destroyed"


class UnavailableReason(str, Enum):
    """Why a message can no longer be revealed."""
    STATUS_EXPIRED = "status_expired"
    VIEW_LIMIT_REACHED = "view_limit_reached"
    TIME_EXPIRED = "time_expired"
    SELF_DESTRUCT_ELAPSED = "self_destruct_elapsed"


class AccessDecision(str, Enum):
    """Outcome of the allow-list policy for one viewer."""
    GRANTED = "granted"
    DENIED = "denied"


class RevealKind(str, Enum):
    """Shape of the store transaction that consumes one unit of view budget."""
    INCREMENT = "increment"
    DELETE = "delete"
