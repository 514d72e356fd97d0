import pytest
from unittest.mock import Mock, MagicMock
from sqlalchemy.orm import Session

from ....core.database import create_db_engine, create_session_factory, init_db
from ..config.attendance_config import AttendanceSettings


@pytest.fixture
def mock_db_session():
    """Create a mock database session."""
    session = MagicMock(spec=Session)
    session.add = Mock()
    session.commit = Mock()
    session.refresh = Mock()
    session.flush = Mock()
    session.rollback = Mock()

    query = MagicMock()
    session.query = Mock(return_value=query)
    query.filter = Mock(return_value=query)
    query.order_by = Mock(return_value=query)
    query.all = Mock(return_value=[])
    query.first = Mock(return_value=None)
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


@pytest.fixture
def attendance_settings():
    return AttendanceSettings()


@pytest.fixture
def block_export():
    """Two employee blocks in the time-clock layout."""
    return "\n".join(
        [
            "BÁO CÁO CHI TIẾT CHẤM CÔNG,,,,,,",
            "Mã nhân viên: 00002         Tên nhân viên: Dung         Phòng ban: --------,,,,,",
            "Ngày,Thứ,Vào 1,Ra 1,Vào 2,Ra 2",
            ",,Vào,Ra,Vào,Ra",
            "2/12/2024,T2,08:30,17:30,,",
            "3/12/2024,T3,08:45,12:30,,",
            "4/12/2024,T4,-,-,,",
            "5/12/2024,T5,08:15,-,,",
            "7/12/2024,T7,08:00,12:00,,",
            "",
            "Mã nhân viên: 00003         Tên nhân viên: Lan         Phòng ban: Kế toán,,,,,",
            "Ngày,Thứ,Vào 1,Ra 1,Vào 2,Ra 2",
            ",,Vào,Ra,Vào,Ra",
            "2/12/2024,T2,08:00,17:00,,",
            "Bảng chi tiết chấm công",
            "9/12/2024,T2,08:00,17:00,,",
        ]
    )
