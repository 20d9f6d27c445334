"""Class occurrences and enrolments."""
import logging
from datetime import date, datetime, timedelta

from fitdesk.errors import ApiError, ValidationFailed
from fitdesk.extensions import db
from fitdesk.models import ClassEnrollment, ClassSchedule

logger = logging.getLogger(__name__)


def _end_time(start_time, minutes):
    return (datetime.combine(date.today(), start_time) + timedelta(minutes=minutes or 60)).time()


def create_schedule(gym_class, scheduled_date, start_time=None, end_time=None, instructor_id=None, notes=None):
    start_time = start_time or gym_class.default_start_time
    if start_time is None:
        raise ValidationFailed("Start time is required")
    end_time = end_time or gym_class.default_end_time or _end_time(start_time, gym_class.duration_minutes)

    exists = ClassSchedule.query.filter_by(
        class_id=gym_class.id, scheduled_date=scheduled_date, start_time=start_time
    ).first()
    if exists:
        raise ApiError("This class is already scheduled at that time", 409)

    schedule = ClassSchedule(
        gym_class=gym_class,
        scheduled_date=scheduled_date,
        start_time=start_time,
        end_time=end_time,
        instructor_id=instructor_id or gym_class.default_instructor_id,
        notes=notes,
    )
    db.session.add(schedule)
    db.session.flush()
    return schedule


def generate_schedules(gym_class, start_date, end_date):
    """Create occurrences of a fixed-schedule class between two dates, skipping existing ones."""
    if not gym_class.has_fixed_schedule or not gym_class.schedule_days:
        raise ValidationFailed("This class has no fixed schedule")

    existing = {
        (s.scheduled_date, s.start_time)
        for s in gym_class.schedules.filter(
            ClassSchedule.scheduled_date >= start_date,
            ClassSchedule.scheduled_date <= end_date,
        )
    }
    created = []
    current = start_date
    while current <= end_date:
        if current.weekday() in gym_class.schedule_days and (current, gym_class.default_start_time) not in existing:
            schedule = ClassSchedule(
                gym_class=gym_class,
                scheduled_date=current,
                start_time=gym_class.default_start_time,
                end_time=gym_class.default_end_time,
                instructor_id=gym_class.default_instructor_id,
            )
            db.session.add(schedule)
            created.append(schedule)
        current += timedelta(days=1)
    db.session.flush()
    logger.info("Generated %s occurrences of class %s", len(created), gym_class.id)
    return created


def enroll_student(schedule, student):
    if schedule.status != "scheduled":
        raise ApiError("This class is not open for enrolment", 400)
    if schedule.scheduled_date < date.today():
        raise ApiError("This class has already taken place", 400)
    if student.company_id != schedule.gym_class.company_id:
        raise ApiError("Student not found", 404)

    enrollment = ClassEnrollment.query.filter_by(schedule_id=schedule.id, student_id=student.id).first()
    if enrollment is not None and enrollment.status == "enrolled":
        raise ApiError("Student is already enrolled in this class", 409)
    if schedule.available_spots <= 0:
        raise ApiError("This class is full", 409)

    if enrollment is None:
        enrollment = ClassEnrollment(schedule=schedule, student=student)
        db.session.add(enrollment)
    else:
        enrollment.status = "enrolled"
        enrollment.cancelled_at = None
        enrollment.enrolled_at = datetime.utcnow()
    db.session.flush()
    return enrollment


def cancel_enrollment(enrollment):
    if enrollment.status == "cancelled":
        raise ApiError("Enrolment is already cancelled", 409)
    enrollment.status = "cancelled"
    enrollment.cancelled_at = datetime.utcnow()
    return enrollment


def cancel_schedule(schedule):
    if schedule.status == "cancelled":
        raise ApiError("This class is already cancelled", 409)
    schedule.status = "cancelled"
    for enrollment in schedule.enrollments.filter_by(status="enrolled"):
        enrollment.status = "cancelled"
        enrollment.cancelled_at = datetime.utcnow()
    return schedule
