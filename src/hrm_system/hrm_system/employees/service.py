from __future__ import annotations

import logging

from ..core.constants import DEFAULT_MAX_CHAIN_DEPTH
from ..core.exceptions import NotFoundError
from .model import Employee
from .repository import EmployeeDirectory

logger = logging.getLogger(__name__)


class EmployeeService:
    """Lookups over the employee directory plus management-chain walks."""

    def __init__(self, directory: EmployeeDirectory, *, max_chain_depth: int = DEFAULT_MAX_CHAIN_DEPTH):
        self._directory = directory
        self._max_depth = int(max_chain_depth)

    def get_employee(self, employee_id: int) -> Employee:
        employee = self._directory.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found", employee_id=int(employee_id))
        return employee

    def lock_employee(self, employee_id: int) -> Employee:
        """Lock the employee row until the enclosing transaction ends.

        Serializes writes that are checked per employee, such as overlapping leave.
        """
        employee = self._directory.get_by_id(int(employee_id), for_update=True)
        if not employee:
            raise NotFoundError("Employee not found", employee_id=int(employee_id))
        return employee

    def list_active(self, *, department_id: int | None = None) -> list[Employee]:
        return list(self._directory.list_active(department_id=department_id))

    def management_chain(self, employee_id: int, *, levels: int | None = None) -> list[int]:
        """Manager ids from the direct manager upwards.

        Stops at the top of the hierarchy, after ``levels`` managers, at the
        depth guard, or when a manager repeats (misconfigured cycle).
        """
        employee = self.get_employee(employee_id)
        limit = self._max_depth if levels is None else min(int(levels), self._max_depth)

        chain: list[int] = []
        seen = {employee.employee_id}
        manager_id = employee.direct_manager_id
        while manager_id is not None and len(chain) < limit:
            if manager_id in seen:
                logger.warning("Management cycle detected at employee %s (chain=%s)", manager_id, chain)
                break
            seen.add(manager_id)

            manager = self._directory.get_by_id(manager_id)
            if not manager:
                break
            if manager.is_active:
                chain.append(manager.employee_id)
            manager_id = manager.direct_manager_id
        return chain
