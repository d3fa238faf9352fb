from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.exceptions import RegenerationWindowError, TimetableExistsError
from app.models.term import Term
from app.models.timetable_slot import TimetableSlot

logger = logging.getLogger(__name__)

DEFAULT_REGENERATION_WINDOW_DAYS = 14


class RegenerationGuard:
    """Decides whether a term's timetable may be wiped and rebuilt.

    The existence check is a plain read, not a lock; two simultaneous
    regenerate calls for one term can both pass it.
    """

    def __init__(
        self,
        db: Session,
        term: Term,
        *,
        window_days: int = DEFAULT_REGENERATION_WINDOW_DAYS,
        today: date | None = None,
    ) -> None:
        self.db = db
        self.term = term
        self.window_days = window_days
        self.today = today or date.today()

    def existing_slot_count(self) -> int:
        return self.db.execute(
            select(func.count()).select_from(TimetableSlot).where(TimetableSlot.term_id == self.term.id)
        ).scalar_one()

    def days_since_start(self) -> int:
        return (self.today - self.term.start_date).days

    def can_regenerate(self) -> bool:
        return self.days_since_start() <= self.window_days

    def authorize(self, regenerate: bool) -> int:
        """Return the number of slots that a purge would remove, or raise."""
        existing = self.existing_slot_count()
        if not regenerate:
            if existing > 0:
                raise TimetableExistsError(
                    "Timetable exists. Use regenerate option if within 2 weeks of term start.",
                    details={"term_id": self.term.id, "existing_slots": existing},
                )
            return 0
        if existing == 0:
            # Nothing to replace; behaves as a first generation.
            return 0

        elapsed = self.days_since_start()
        if elapsed > self.window_days:
            raise RegenerationWindowError(
                "Cannot regenerate: More than 2 weeks since term start",
                details={
                    "term_id": self.term.id,
                    "days_since_term_start": elapsed,
                    "window_days": self.window_days,
                },
            )
        return existing

    def purge(self) -> int:
        """Delete every slot of the term inside the caller's transaction."""
        result = self.db.execute(delete(TimetableSlot).where(TimetableSlot.term_id == self.term.id))
        removed = result.rowcount or 0
        logger.info("Purged term timetable | term_id=%s removed=%s", self.term.id, removed)
        return removed
