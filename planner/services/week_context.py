"""Currently selected week, with observers notified on every change.

Observers replace ad-hoc logging on context updates: attach one with
subscribe() and detach it with the returned callable.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime

from planner.core.week_identity import current_week_identity, week_identity_of
from planner.domain.week import WeekIdentity


logger = logging.getLogger(__name__)

WeekObserver = Callable[[WeekIdentity], None]


class WeekContext:
    """Selected week shared by the views of one session."""

    def __init__(self, initial: WeekIdentity | None = None) -> None:
        self._week = initial or current_week_identity()
        self._observers: list[WeekObserver] = []

    @property
    def week(self) -> WeekIdentity:
        return self._week

    @property
    def week_id(self) -> str:
        return self._week.id

    def subscribe(self, observer: WeekObserver) -> Callable[[], None]:
        """Register an observer and return a callable that removes it."""
        if observer not in self._observers:
            self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def set_week_range(self, start: datetime, end: datetime, week_id: str) -> None:
        """Select a week by explicit boundaries, e.g. a stored record that drifted."""
        self._week = WeekIdentity(id=week_id, start=start, end=end)
        self._notify()

    def select_date(self, value: date | datetime | str) -> WeekIdentity:
        """Select the canonical week containing value.

        Raises:
            InvalidDateError: If value is not a usable date; the selection is left unchanged
        """
        self._week = week_identity_of(value)
        self._notify()
        return self._week

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self._week)
            except Exception:
                logger.exception("Week observer %r failed", observer)
