"""Access Policy — allow-list evaluation for one candidate viewer.

Invariants:
    - Both lists empty → GRANTED for anyone (even without an email)
    - Otherwise GRANTED iff email ∈ allowed_recipients OR "@" + domain ∈ allowed_domains
    - Domain comparison is exact equality after lower-casing — "@evilx.com"
      never satisfies "@x.com", and "@mail.x.com" never satisfies "@x.com"
    - Untrusted email is trimmed and lower-cased; anything without exactly one
      "@" (or with an empty side) is DENIED on a restricted record

Design Decisions:
    - Pure functions over a policy class: no state, trivially testable
    - normalize_* shared with creation-time validation so stored lists and
      candidate emails go through the same canonicalization
"""

from collections.abc import Iterable

from vanish.core.domain_types import AccessDecision
from vanish.core.message_record import MessageRecord


def normalize_email(raw: str | None) -> str | None:
    """Canonical form of an untrusted email, or None if malformed."""
    if raw is None:
        return None
    email = raw.strip().lower()
    if email.count("@") != 1:
        return None
    local, domain = email.split("@")
    if not local or not domain:
        return None
    return email


def _canonical(raw: str) -> str:
    return raw.strip().lower()


def normalize_recipient(raw: str) -> str:
    """Canonical form of an allowed-recipient entry."""
    return _canonical(raw)


def normalize_domain(raw: str) -> str:
    """Canonical "@domain" form of an allow-list entry."""
    return _canonical(raw)


def email_domain(email: str) -> str:
    """Domain portion of a normalized email, "@"-prefixed."""
    return "@" + email.split("@", 1)[1]


def evaluate_allow_lists(
    allowed_recipients: Iterable[str],
    allowed_domains: Iterable[str],
    viewer_email: str | None,
) -> AccessDecision:
    recipients = {normalize_recipient(r) for r in allowed_recipients}
    domains = {normalize_domain(d) for d in allowed_domains}
    if not recipients and not domains:
        return AccessDecision.GRANTED

    email = normalize_email(viewer_email)
    if email is None:
        return AccessDecision.DENIED
    if email in recipients:
        return AccessDecision.GRANTED
    if email_domain(email) in domains:
        return AccessDecision.GRANTED
    return AccessDecision.DENIED


def evaluate_access(record: MessageRecord, viewer_email: str | None) -> AccessDecision:
    """Apply the record's allow-lists to a candidate viewer."""
    return evaluate_allow_lists(
        record.allowed_recipients, record.allowed_domains, viewer_email,
    )
