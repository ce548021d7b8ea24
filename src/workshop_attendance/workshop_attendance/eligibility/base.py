from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from ..attendance.repository import AttendanceRepository
from ..core.enums import DenyReason
from ..core.exceptions import EligibilityDenied
from ..days.model import Day
from ..sessions.model import Assignment, Session


@dataclass(frozen=True)
class EligibilityContext:
    """Everything a rule may look at for one student write."""

    register_number: str
    now: datetime
    attendance: AttendanceRepository
    session: Optional[Session] = None
    day: Optional[Day] = None
    assignment: Optional[Assignment] = None
    photo_supplied: bool = False
    payload_supplied: bool = False


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: Optional[DenyReason] = None

    @staticmethod
    def allow() -> "GateDecision":
        return GateDecision(allowed=True)

    @staticmethod
    def deny(reason: DenyReason) -> "GateDecision":
        return GateDecision(allowed=False, reason=reason)

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise EligibilityDenied(self.reason)


class EligibilityRule(ABC):
    """One gate check. Returns None to pass or the reason to deny."""

    @abstractmethod
    def check(self, ctx: EligibilityContext) -> Optional[DenyReason]:
        raise NotImplementedError


def evaluate(rules: Iterable[EligibilityRule], ctx: EligibilityContext) -> GateDecision:
    """First failing rule wins; later rules (and their lookups) are skipped."""
    for rule in rules:
        reason = rule.check(ctx)
        if reason is not None:
            return GateDecision.deny(reason)
    return GateDecision.allow()
