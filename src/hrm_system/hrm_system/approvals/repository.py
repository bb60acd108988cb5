from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import StepStatus
from .model import ApprovalStep


class ApprovalStepRepository(Protocol):
    def create_steps(self, *, request_id: int, approver_ids: Sequence[int]) -> list[int]:
        """Insert one pending step per approver, ordered 1..n."""

        raise NotImplementedError

    def list_for_request(self, request_id: int) -> Sequence[ApprovalStep]:
        raise NotImplementedError

    def update_step(
        self,
        *,
        step_id: int,
        status: StepStatus,
        comments: Optional[str],
        processed_at: datetime,
    ) -> bool:
        raise NotImplementedError

    def list_request_ids_awaiting(self, approver_id: int) -> Sequence[int]:
        """Pending requests whose current step belongs to ``approver_id``."""

        raise NotImplementedError
