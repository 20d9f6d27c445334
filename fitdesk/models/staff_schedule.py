from datetime import datetime
from fitdesk.extensions import db

ABSENCE_TYPES = ("vacation", "sick", "personal", "maternity", "unpaid", "other")
ABSENCE_STATUSES = ("pending", "approved", "rejected")
CONTRACT_TYPES = ("full_time", "part_time", "freelance", "internship")

DEFAULT_VACATION_DAYS = 22
DEFAULT_PERSONAL_DAYS = 2


def _hours_between(start, end):
    minutes = (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
    return round(minutes / 60, 2)


class StaffWorkSchedule(db.Model):
    """One working day of a staff member's weekly schedule (0 = Monday)."""
    __tablename__ = "staff_work_schedules"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    day_of_week = db.Column(db.Integer, nullable=False)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)

    staff = db.relationship("Staff", back_populates="work_schedule")

    __table_args__ = (
        db.UniqueConstraint("staff_id", "day_of_week", name="uq_staff_work_day"),
        db.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="check_work_day_of_week"),
    )

    @property
    def hours(self):
        return _hours_between(self.start_time, self.end_time)

    def to_dict(self):
        return {
            "id": self.id,
            "day_of_week": self.day_of_week,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "hours": self.hours,
        }


class StaffAbsence(db.Model):
    __tablename__ = "staff_absences"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    absence_type = db.Column(db.String(20), nullable=False, default="vacation")
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    total_days = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('pending','approved','rejected')"),
        default="pending",
        index=True,
    )
    reviewed_at = db.Column(db.DateTime)
    reviewed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    staff = db.relationship("Staff", back_populates="absences")

    __table_args__ = (
        db.CheckConstraint("end_date >= start_date", name="check_absence_dates"),
    )

    def covers(self, day):
        return self.start_date <= day <= self.end_date

    def to_dict(self):
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "staff_name": self.staff.full_name if self.staff else None,
            "absence_type": self.absence_type,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_days": self.total_days,
            "reason": self.reason,
            "status": self.status,
            "reviewed_at": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class StaffLeaveBalance(db.Model):
    """Yearly leave entitlement; days used are counted from approved absences."""
    __tablename__ = "staff_leave_balances"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    staff_id = db.Column(db.Integer, db.ForeignKey("staff.id"), nullable=False, index=True)
    year = db.Column(db.Integer, nullable=False)
    vacation_days_entitled = db.Column(db.Integer, nullable=False, default=DEFAULT_VACATION_DAYS)
    personal_days_entitled = db.Column(db.Integer, nullable=False, default=DEFAULT_PERSONAL_DAYS)

    staff = db.relationship("Staff", back_populates="leave_balances")

    __table_args__ = (
        db.UniqueConstraint("staff_id", "year", name="uq_staff_leave_year"),
    )
