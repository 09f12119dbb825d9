"""Admission verdicts: the one value produced per request."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Action(Enum):
    ACCEPT = "accept"
    REJECT = "reject"


@dataclass(frozen=True, slots=True)
class Verdict:
    """Immutable accept/reject decision.

    An accept carries an empty message; a reject always carries a
    human-readable reason.
    """
    action: Action
    msg: str = ""

    def __post_init__(self) -> None:
        if self.action is Action.REJECT and not self.msg:
            raise ValueError("A reject verdict needs a non-empty reason")
        if self.action is Action.ACCEPT and self.msg:
            raise ValueError("An accept verdict carries no message")

    @classmethod
    def accept(cls) -> Verdict:
        """Factory: accept the event."""
        return cls(action=Action.ACCEPT)

    @classmethod
    def reject(cls, reason: str) -> Verdict:
        """Factory: reject the event with a reason."""
        return cls(action=Action.REJECT, msg=reason)

    def is_accepted(self) -> bool:
        """Returns True only for ACCEPT."""
        return self.action is Action.ACCEPT
