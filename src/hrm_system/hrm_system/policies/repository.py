from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import LeavePolicy, LeavePolicyData


class PolicyRepository(Protocol):
    def get_by_id(self, policy_id: int) -> Optional[LeavePolicy]:
        raise NotImplementedError

    def list_active(self) -> Sequence[LeavePolicy]:
        raise NotImplementedError

    def create(self, data: LeavePolicyData) -> int:
        raise NotImplementedError

    def update(self, policy_id: int, data: LeavePolicyData) -> bool:
        raise NotImplementedError

    def set_active(self, policy_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError
