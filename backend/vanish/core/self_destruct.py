"""Self-Destruct Deadline Math — arming, remaining time, countdown breakdown.

Invariants:
    - deadline = armed_at + timer_seconds, computed from the server clock only
    - countdown() returns None once the deadline is reached (nothing left to show)
    - Pure: the client countdown is a display affordance; deletion authority
      lives in the shell (services/self_destruct.py)
"""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int
    seconds: int

    def to_dict(self) -> dict:
        return {
            "days": self.days, "hours": self.hours,
            "minutes": self.minutes, "seconds": self.seconds,
        }


def compute_deadline(armed_at: datetime, timer_seconds: int) -> datetime:
    return armed_at + timedelta(seconds=timer_seconds)


def remaining_seconds(deadline: datetime, now: datetime) -> int:
    return max(0, int((deadline - now).total_seconds()))


def countdown(deadline: datetime, now: datetime) -> Countdown | None:
    """Break the time left into days/hours/minutes/seconds."""
    left = remaining_seconds(deadline, now)
    if left <= 0:
        return None
    days, rest = divmod(left, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, seconds = divmod(rest, 60)
    return Countdown(days=days, hours=hours, minutes=minutes, seconds=seconds)
