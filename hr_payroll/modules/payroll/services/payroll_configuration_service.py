# hr_payroll/modules/payroll/services/payroll_configuration_service.py

"""
Salary regulation lookup.

Regulations are read fresh before every payroll run. Missing rows and
missing columns both fall back to the documented defaults, so a partially
configured deployment can still run payroll.
"""

import logging
from datetime import date
from typing import Any, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..exceptions import PayrollConfigurationError
from ..models.payroll_models import SalaryRegulation
from ..schemas.payroll_schemas import SalaryRegulations

logger = logging.getLogger(__name__)

REGULATION_FIELDS = tuple(
    name for name in SalaryRegulations.model_fields if name != "effective_date"
)


class SalaryRegulationRepository:
    """Reads and writes salary_regulations rows."""

    def __init__(self, db: Session):
        self.db = db

    def get_latest(self, as_of: date) -> Optional[SalaryRegulation]:
        """Newest regulation effective on or before as_of (latest created wins on ties)."""
        return (
            self.db.query(SalaryRegulation)
            .filter(SalaryRegulation.effective_date <= as_of)
            .order_by(
                SalaryRegulation.effective_date.desc(),
                SalaryRegulation.created_at.desc(),
                SalaryRegulation.id.desc(),
            )
            .first()
        )

    def create(self, effective_date: date, **values: Any) -> SalaryRegulation:
        unknown = set(values) - set(REGULATION_FIELDS)
        if unknown:
            raise ValueError(f"Unknown regulation fields: {', '.join(sorted(unknown))}")
        regulation = SalaryRegulation(effective_date=effective_date, **values)
        self.db.add(regulation)
        self.db.commit()
        self.db.refresh(regulation)
        return regulation


def regulations_from_row(row: Optional[SalaryRegulation]) -> SalaryRegulations:
    if row is None:
        return SalaryRegulations()
    data: Dict[str, Any] = {name: getattr(row, name) for name in REGULATION_FIELDS}
    data["effective_date"] = row.effective_date
    try:
        return SalaryRegulations(**data)
    except ValidationError as e:
        loc = e.errors()[0]["loc"]
        field = str(loc[0]) if loc else None
        raise PayrollConfigurationError(
            f"Salary regulation effective {row.effective_date} is invalid: {e.error_count()} error(s)",
            config_key=field,
        )


class PayrollConfigurationService:
    """Service resolving the SalaryRegulations in force for a payroll run."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.repository = SalaryRegulationRepository(db_session)

    def get_latest_regulations(self, as_of: date) -> SalaryRegulations:
        row = self.repository.get_latest(as_of)
        if row is None:
            logger.warning("No salary regulations effective on %s, using defaults", as_of)
        return regulations_from_row(row)
