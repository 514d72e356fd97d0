# hr_payroll/modules/payroll/tests/conftest.py

"""
Pytest fixtures for payroll module tests.
"""

import pytest
from decimal import Decimal
from unittest.mock import Mock, MagicMock

from sqlalchemy.orm import Session

from ....core.database import create_db_engine, create_session_factory, init_db
from ..schemas.payroll_schemas import SalaryRegulations
from ..services.payroll_calculation_engine import PayrollCalculationEngine
from .factories import AttendanceSummaryFactory, CompensationProfileFactory


# Database fixtures
@pytest.fixture
def mock_db_session():
    """Create a mock database session."""
    session = MagicMock(spec=Session)
    session.add = Mock()
    session.commit = Mock()
    session.refresh = Mock()
    session.rollback = Mock()

    query = MagicMock()
    session.query = Mock(return_value=query)
    query.filter = Mock(return_value=query)
    query.order_by = Mock(return_value=query)
    query.first = Mock(return_value=None)
    query.__iter__ = Mock(return_value=iter([]))
    return session


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_db_engine("sqlite://")
    init_db(engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# Calculation fixtures
@pytest.fixture
def regulations():
    return SalaryRegulations()


@pytest.fixture
def engine(regulations):
    return PayrollCalculationEngine(regulations)


@pytest.fixture
def regular_profile():
    return CompensationProfileFactory(base_salary=Decimal("22000000")).create()


@pytest.fixture
def full_month_summary():
    return AttendanceSummaryFactory(present_days=Decimal("22")).create()
