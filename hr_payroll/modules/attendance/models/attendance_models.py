from sqlalchemy import (
    Column,
    Integer,
    Date,
    DateTime,
    String,
    Numeric,
    Enum,
    Text,
    UniqueConstraint,
    Index,
)

from ....core.database import Base
from ....core.mixins import TimestampMixin
from ..enums.attendance_enums import AttendanceStatus


class AttendanceRecordModel(Base, TimestampMixin):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
        Index("ix_attendance_date", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    date = Column(Date, nullable=False)
    check_in_time = Column(DateTime, nullable=True)
    check_out_time = Column(DateTime, nullable=True)
    work_value = Column(Numeric(4, 2), nullable=False, default=0)
    late_minutes = Column(Integer, nullable=False, default=0)
    early_minutes = Column(Integer, nullable=False, default=0)
    overtime_hours = Column(Numeric(6, 2), nullable=False, default=0)
    total_minutes = Column(Integer, nullable=False, default=0)
    status = Column(
        Enum(
            AttendanceStatus,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
        ),
        nullable=False,
        default=AttendanceStatus.ABSENT,
    )
    notes = Column(Text, nullable=True)
    day_of_week = Column(String(3), nullable=False, default="")

    def __repr__(self):
        return (
            f"<AttendanceRecordModel(employee_id={self.employee_id}, "
            f"date={self.date}, status={self.status})>"
        )
