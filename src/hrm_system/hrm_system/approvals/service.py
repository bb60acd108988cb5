from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..core.enums import ApprovalDecision, LeaveStatus, StepStatus
from ..core.exceptions import NotCurrentApprover, NotFoundError, RequestNotPending
from ..database.unit_of_work import UnitOfWork
from ..leave.model import LeaveRequest
from ..leave.repository import LeaveRequestRepository
from ..leave.service import LeaveRequestService
from .model import ApprovalStep, current_step
from .repository import ApprovalStepRepository

logger = logging.getLogger(__name__)


class ApprovalWorkflowService:
    """Strictly sequential approval chain attached to a leave request.

    The request row is locked for the whole decision, so concurrent
    approvers serialize and see each other's step updates.
    """

    def __init__(
        self,
        steps: ApprovalStepRepository,
        requests: LeaveRequestRepository,
        leave: LeaveRequestService,
        uow: UnitOfWork,
    ):
        self._steps = steps
        self._requests = requests
        self._leave = leave
        self._uow = uow

    def list_steps(self, request_id: int) -> list[ApprovalStep]:
        return list(self._steps.list_for_request(int(request_id)))

    def current_step(self, request_id: int) -> Optional[ApprovalStep]:
        return current_step(self.list_steps(request_id))

    def process_step(
        self,
        *,
        request_id: int,
        approver_id: int,
        decision: ApprovalDecision,
        comments: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> LeaveRequest:
        now = now or datetime.now()
        decision = ApprovalDecision(decision)
        comments = (comments or "").strip() or None

        with self._uow.transaction():
            req = self._requests.get_by_id(int(request_id), for_update=True)
            if not req:
                raise NotFoundError("Leave request not found", request_id=int(request_id))

            step = current_step(self._steps.list_for_request(req.request_id))
            if step is None or step.approver_id != int(approver_id):
                raise NotCurrentApprover(
                    "It is not this approver's turn",
                    request_id=req.request_id,
                    approver_id=int(approver_id),
                    current_approver_id=step.approver_id if step else None,
                )
            if req.status != LeaveStatus.PENDING:
                raise RequestNotPending(
                    "Leave request is no longer pending", request_id=req.request_id, status=req.status.value
                )

            if decision == ApprovalDecision.REJECT:
                self._steps.update_step(
                    step_id=step.step_id, status=StepStatus.REJECTED, comments=comments, processed_at=now
                )
                logger.info("Step %s of request %s rejected by %s", step.step_order, req.request_id, approver_id)
                return self._leave.finalize_rejection(req, approver_id=int(approver_id), comments=comments, now=now)

            self._steps.update_step(step_id=step.step_id, status=StepStatus.APPROVED, comments=comments, processed_at=now)
            logger.info("Step %s of request %s approved by %s", step.step_order, req.request_id, approver_id)

            if current_step(self._steps.list_for_request(req.request_id)) is not None:
                return self._leave.get_request(req.request_id)
            return self._leave.finalize_approval(req, approver_id=int(approver_id), comments=comments, now=now)
