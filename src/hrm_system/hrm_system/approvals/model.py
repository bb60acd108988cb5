from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import StepStatus


@dataclass(frozen=True)
class ApprovalStep:
    step_id: int
    request_id: int
    approver_id: int
    step_order: int
    status: StepStatus = StepStatus.PENDING
    comments: Optional[str] = None
    processed_at: Optional[datetime] = None


def current_step(steps: Sequence[ApprovalStep]) -> Optional[ApprovalStep]:
    """Lowest-order pending step, or None when the chain is finished."""
    pending = [s for s in steps if s.status == StepStatus.PENDING]
    return min(pending, key=lambda s: s.step_order) if pending else None
