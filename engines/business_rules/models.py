"""
Feather Business Rules — Gate Decision
========================================
Outcome of evaluating one trigger point for one tenant.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class GateDecision:
    """
    Fields:
        allowed:       False only when a script returned allow=False.
        message:       The blocking script's message.
        trigger_point: Trigger point that was evaluated.
        blocked_by:    Id of the blocking script.
        scripts_run:   Scripts invoked before the chain ended.
    """

    allowed: bool
    trigger_point: str
    message: Optional[str] = None
    blocked_by: Optional[str] = None
    scripts_run: int = 0

    def __post_init__(self):
        if not isinstance(self.allowed, bool):
            raise ValueError("allowed must be a bool.")
        if not self.allowed and not self.message:
            raise ValueError("A blocking decision requires a message.")

    def to_dict(self) -> dict:
        data = {
            "allowed": self.allowed,
            "trigger_point": self.trigger_point,
            "scripts_run": self.scripts_run,
        }
        if self.message is not None:
            data["message"] = self.message
        if self.blocked_by is not None:
            data["blocked_by"] = self.blocked_by
        return data
