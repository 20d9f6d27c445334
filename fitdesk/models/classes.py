from datetime import datetime
from fitdesk.extensions import db


class Room(db.Model):
    __tablename__ = "rooms"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    capacity = db.Column(db.Integer, nullable=False, default=20)
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    classes = db.relationship("GymClass", back_populates="room")

    __table_args__ = (
        db.CheckConstraint("capacity > 0", name="check_room_capacity"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "capacity": self.capacity,
            "description": self.description,
            "is_active": bool(self.is_active),
        }


class GymClass(db.Model):
    """A class type; may carry a fixed weekly schedule used to generate occurrences."""
    __tablename__ = "classes"

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id"), nullable=False, index=True)
    room_id = db.Column(db.Integer, db.ForeignKey("rooms.id"), nullable=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    capacity = db.Column(db.Integer, nullable=False, default=20)
    duration_minutes = db.Column(db.Integer, default=60)
    color = db.Column(db.String(20))
    is_active = db.Column(db.Boolean, default=True)

    has_fixed_schedule = db.Column(db.Boolean, default=False)
    # list of weekday numbers, 0 = Monday
    schedule_days = db.Column(db.JSON, default=list)
    default_start_time = db.Column(db.Time)
    default_end_time = db.Column(db.Time)
    default_instructor_id = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    room = db.relationship("Room", back_populates="classes")
    default_instructor = db.relationship("Staff")
    schedules = db.relationship("ClassSchedule", back_populates="gym_class", lazy="dynamic", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("capacity > 0", name="check_class_capacity"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "capacity": self.capacity,
            "duration_minutes": self.duration_minutes,
            "color": self.color,
            "is_active": bool(self.is_active),
            "room_id": self.room_id,
            "room_name": self.room.name if self.room else None,
            "has_fixed_schedule": bool(self.has_fixed_schedule),
            "schedule_days": self.schedule_days or [],
            "default_start_time": self.default_start_time.strftime("%H:%M") if self.default_start_time else None,
            "default_end_time": self.default_end_time.strftime("%H:%M") if self.default_end_time else None,
            "default_instructor_id": self.default_instructor_id,
        }


class ClassSchedule(db.Model):
    __tablename__ = "class_schedules"

    id = db.Column(db.Integer, primary_key=True)
    class_id = db.Column(db.Integer, db.ForeignKey("classes.id"), nullable=False, index=True)
    instructor_id = db.Column(db.Integer, db.ForeignKey("staff.id", ondelete="SET NULL"), nullable=True)
    scheduled_date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('scheduled','cancelled','completed')"),
        default="scheduled",
    )
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    gym_class = db.relationship("GymClass", back_populates="schedules")
    instructor = db.relationship("Staff")
    enrollments = db.relationship("ClassEnrollment", back_populates="schedule", lazy="dynamic", cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("class_id", "scheduled_date", "start_time", name="uq_class_schedule_slot"),
    )

    @property
    def enrolled_count(self):
        return self.enrollments.filter_by(status="enrolled").count()

    @property
    def available_spots(self):
        return max(self.gym_class.capacity - self.enrolled_count, 0)

    def to_dict(self):
        return {
            "id": self.id,
            "class_id": self.class_id,
            "class_name": self.gym_class.name if self.gym_class else None,
            "color": self.gym_class.color if self.gym_class else None,
            "room_name": self.gym_class.room.name if self.gym_class and self.gym_class.room else None,
            "instructor_id": self.instructor_id,
            "instructor_name": self.instructor.full_name if self.instructor else None,
            "scheduled_date": self.scheduled_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status,
            "notes": self.notes,
            "capacity": self.gym_class.capacity if self.gym_class else None,
            "enrolled_count": self.enrolled_count,
            "available_spots": self.available_spots,
        }


class ClassEnrollment(db.Model):
    __tablename__ = "class_enrollments"

    id = db.Column(db.Integer, primary_key=True)
    schedule_id = db.Column(db.Integer, db.ForeignKey("class_schedules.id"), nullable=False, index=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)
    status = db.Column(
        db.String(20),
        db.CheckConstraint("status IN ('enrolled','cancelled')"),
        default="enrolled",
    )
    attended = db.Column(db.Boolean)
    enrolled_at = db.Column(db.DateTime, default=datetime.utcnow)
    cancelled_at = db.Column(db.DateTime)

    schedule = db.relationship("ClassSchedule", back_populates="enrollments")
    student = db.relationship("Student", back_populates="enrollments")

    __table_args__ = (
        db.UniqueConstraint("schedule_id", "student_id", name="uq_class_enrollment"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "schedule_id": self.schedule_id,
            "student_id": self.student_id,
            "student_name": self.student.full_name if self.student else None,
            "status": self.status,
            "attended": self.attended,
            "enrolled_at": self.enrolled_at.isoformat() if self.enrolled_at else None,
        }
