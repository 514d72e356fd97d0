# hr_payroll/core/context.py

"""
Explicit "as-of" context.

Entry points that would otherwise read the wall clock (default month for
an import, regulation lookup date, batch run timestamp) take an AsOfContext
instead, so that a run can be replayed exactly in tests.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class AsOfContext:
    """Reference date for a computation."""

    today: date
    now: Optional[datetime] = field(default=None)

    @property
    def month(self) -> int:
        return self.today.month

    @property
    def year(self) -> int:
        return self.today.year

    @property
    def timestamp(self) -> datetime:
        return self.now or datetime.combine(self.today, time.min)

    @classmethod
    def current(cls) -> "AsOfContext":
        """Context for the actual current moment (CLI and service use only)."""
        now = datetime.now()
        return cls(today=now.date(), now=now)
