from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import iter_dates
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import PublicHoliday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)


class HolidayService:
    """Holiday calendar: admin maintenance plus ``is_public_holiday`` lookups."""

    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def add_holiday(
        self,
        *,
        current_role: Role,
        name: str,
        holiday_date: date,
        department_id: Optional[int] = None,
        is_paid: bool = True,
    ) -> int:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can maintain holidays")
        name = require_non_empty(name, "Holiday name")
        holiday_id = self._holidays.create(
            name=name, holiday_date=holiday_date, department_id=department_id, is_paid=is_paid
        )
        logger.info("Holiday %s added on %s (department=%s)", holiday_id, holiday_date, department_id)
        return holiday_id

    def deactivate_holiday(self, *, current_role: Role, holiday_id: int) -> None:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only HR admins can maintain holidays")
        if not self._holidays.set_active(holiday_id=int(holiday_id), is_active=False):
            raise NotFoundError("Holiday not found", holiday_id=int(holiday_id))

    def list_holidays(self, *, start: date, end: date, department_id: Optional[int] = None) -> list[PublicHoliday]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        return list(self._holidays.list_range(start=start, end=end, department_id=department_id))

    def is_public_holiday(self, day: date, department_id: Optional[int] = None) -> bool:
        return any(h.applies_to(department_id) for h in self._holidays.list_range(start=day, end=day, department_id=department_id))


class BusinessDayCalculator:
    """Counts business days: not a weekend day and not an applicable active holiday.

    Weekend days are Python weekday numbers (Monday = 0).
    """

    def __init__(self, holidays: HolidayRepository, *, weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS):
        self._holidays = holidays
        self._weekend = frozenset(int(d) for d in weekend_days)

    def holiday_dates(self, start: date, end: date, department_id: Optional[int] = None) -> set[date]:
        return {
            h.holiday_date
            for h in self._holidays.list_range(start=start, end=end, department_id=department_id)
            if h.applies_to(department_id)
        }

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self._weekend

    def business_days(self, start: date, end: date, department_id: Optional[int] = None) -> list[date]:
        if end < start:
            return []
        holidays = self.holiday_dates(start, end, department_id)
        return [d for d in iter_dates(start, end) if not self.is_weekend(d) and d not in holidays]

    def count(self, start: date, end: date, department_id: Optional[int] = None) -> int:
        return len(self.business_days(start, end, department_id))
