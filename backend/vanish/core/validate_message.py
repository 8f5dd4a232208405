"""Message Creation Rules — pure validation of owner-supplied message settings.

Invariants:
    - Custom expiration "1d 5h 30m" → total minutes, 0 < total <= MAX_EXPIRATION_MINUTES
    - Recipient emails match local@domain.tld; domains start with "@",
      contain a ".", and are longer than 3 characters
    - Returned lists are lower-cased and de-duplicated in first-seen order
    - Self-destruct timer: 1 second up to the maximum expiration window, in seconds

Design Decisions:
    - Raise MessageValidationError (not return dicts): creation is a request
      boundary, the global handler renders the 400 envelope
"""

import re

from vanish.core.errors import MessageValidationError
from vanish.core.evaluate_access import normalize_domain, normalize_recipient


MAX_EXPIRATION_MINUTES: int = 43_200  # 30 days

_DURATION_PATTERN = re.compile(
    r"^\s*(?:(\d+)d)?\s*(?:(\d+)h)?\s*(?:(\d+)m)?\s*$", re.IGNORECASE,
)
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def parse_expiration(text: str, max_minutes: int = MAX_EXPIRATION_MINUTES) -> int:
    """Parse a "1d 5h 30m" style duration into minutes."""
    match = _DURATION_PATTERN.match(text)
    if not match or not any(match.groups()):
        raise MessageValidationError(
            "Please use format: 1d 5h 30m", field="expiration",
        )
    days, hours, minutes = (int(g) if g else 0 for g in match.groups())
    total = days * 24 * 60 + hours * 60 + minutes
    if total == 0:
        raise MessageValidationError(
            "Duration must be greater than 0", field="expiration",
        )
    if total > max_minutes:
        raise MessageValidationError(
            f"Duration cannot exceed {max_minutes // (24 * 60)} days",
            field="expiration",
        )
    return total


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value))


def is_valid_domain(value: str) -> bool:
    return value.startswith("@") and "." in value and len(value) > 3


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


def normalize_recipients(values: list[str]) -> list[str]:
    normalized = [normalize_recipient(v) for v in values if v.strip()]
    for email in normalized:
        if not is_valid_email(email):
            raise MessageValidationError(
                f"Invalid email address: {email}", field="allowed_recipients",
            )
    return _dedupe(normalized)


def normalize_domains(values: list[str]) -> list[str]:
    normalized = [normalize_domain(v) for v in values if v.strip()]
    for domain in normalized:
        if not domain.startswith("@"):
            raise MessageValidationError(
                f"Domain must start with @: {domain}", field="allowed_domains",
            )
        if not is_valid_domain(domain):
            raise MessageValidationError(
                f"Invalid domain: {domain}", field="allowed_domains",
            )
    return _dedupe(normalized)


def build_message_fields(
    *,
    owner_id: str,
    body: str,
    view_limit: int,
    expiration_minutes: int,
    self_destruct: bool,
    self_destruct_timer_seconds: int | None,
    allowed_recipients: list[str],
    allowed_domains: list[str],
    attachments: list[dict],
    max_expiration_minutes: int = MAX_EXPIRATION_MINUTES,
) -> dict:
    """Validated column values for a new, active, never-viewed message."""
    body = body.strip()
    if not body:
        raise MessageValidationError(
            "Message content cannot be empty", field="body",
        )
    if view_limit < 1:
        raise MessageValidationError(
            "View limit must be at least 1", field="view_limit",
        )
    if not 0 < expiration_minutes <= max_expiration_minutes:
        raise MessageValidationError(
            f"Expiration must be between 1 and {max_expiration_minutes} minutes",
            field="expiration_minutes",
        )
    timer = self_destruct_timer_seconds if self_destruct else None
    if timer is not None and not 0 < timer <= max_expiration_minutes * 60:
        raise MessageValidationError(
            f"Self-destruct timer must be between 1 and "
            f"{max_expiration_minutes * 60} seconds",
            field="self_destruct_timer_seconds",
        )
    return {
        "owner_id": owner_id,
        "body": body,
        "expiration_minutes": expiration_minutes,
        "view_limit": view_limit,
        "view_count": 0,
        "status": "active",
        "self_destruct": self_destruct,
        "self_destruct_timer_seconds": timer,
        "allowed_recipients": normalize_recipients(allowed_recipients),
        "allowed_domains": normalize_domains(allowed_domains),
        "attachments": attachments,
    }
