"""Effective-today clock.

The working day ends at a fixed local hour rather than at midnight: from the
cutoff hour onwards, "today" for countdown purposes is the calendar tomorrow.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime, timedelta
from enum import StrEnum
from zoneinfo import ZoneInfo


logger = logging.getLogger(__name__)

TodayListener = Callable[[date], Awaitable[None] | None]


class ClockState(StrEnum):
    """Position of the wall clock relative to the daily cutoff."""

    PRE_CUTOFF = "pre_cutoff"
    POST_CUTOFF = "post_cutoff"


def local_now(tz_name: str | None = None) -> datetime:
    """Return the current aware local time, in tz_name when given."""
    if tz_name:
        return datetime.now(ZoneInfo(tz_name))
    return datetime.now().astimezone()


def clock_state(now: datetime, cutoff_hour: int) -> ClockState:
    return ClockState.POST_CUTOFF if now.hour >= cutoff_hour else ClockState.PRE_CUTOFF


def effective_today(now: datetime, cutoff_hour: int) -> date:
    """Return calendar tomorrow once now is at or past the cutoff hour, else calendar today."""
    if clock_state(now, cutoff_hour) is ClockState.POST_CUTOFF:
        return now.date() + timedelta(days=1)
    return now.date()


def next_cutoff_crossing(now: datetime, cutoff_hour: int) -> datetime:
    """Return the next instant at which effective today advances."""
    crossing = now.replace(hour=cutoff_hour, minute=0, second=0, microsecond=0)
    if now >= crossing:
        crossing = (now + timedelta(days=1)).replace(hour=cutoff_hour, minute=0, second=0, microsecond=0)
    return crossing


class CutoffClock:
    """Tracks effective today and notifies listeners when it advances.

    The observed value only moves forward: a wall clock that steps backwards
    (manual change, DST) never returns an earlier day.
    """

    def __init__(
        self,
        *,
        cutoff_hour: int,
        tz_name: str | None = None,
        now_func: Callable[[], datetime] | None = None,
    ) -> None:
        self.cutoff_hour = cutoff_hour
        self._now_func = now_func or (lambda: local_now(tz_name))
        self._current = effective_today(self._now_func(), cutoff_hour)
        self._listeners: list[TodayListener] = []

    def now(self) -> datetime:
        return self._now_func()

    @property
    def state(self) -> ClockState:
        return clock_state(self.now(), self.cutoff_hour)

    def today(self) -> date:
        """Return effective today without notifying listeners."""
        return max(self._current, effective_today(self.now(), self.cutoff_hour))

    def next_crossing(self) -> datetime:
        return next_cutoff_crossing(self.now(), self.cutoff_hour)

    def subscribe(self, listener: TodayListener) -> None:
        """Register a callable invoked with the new effective today after each advance."""
        self._listeners.append(listener)

    async def check(self) -> bool:
        """Re-evaluate effective today; notify listeners and return True if it advanced."""
        observed = effective_today(self.now(), self.cutoff_hour)

        if observed < self._current:
            logger.warning(
                "Wall clock moved backwards, keeping effective today",
                extra={"observed": observed.isoformat(), "current": self._current.isoformat()},
            )
            return False
        if observed == self._current:
            return False

        previous, self._current = self._current, observed
        logger.info(
            "Effective today advanced",
            extra={"previous": previous.isoformat(), "current": observed.isoformat()},
        )

        for listener in self._listeners:
            try:
                result = listener(observed)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("effective_today_listener_failed", extra={"error": str(e)})
        return True
