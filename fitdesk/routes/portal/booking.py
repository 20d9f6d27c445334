from datetime import date, timedelta

from flask import g, jsonify, request

from fitdesk.errors import NotFound
from fitdesk.extensions import db
from fitdesk.models import ClassEnrollment, ClassSchedule, GymClass
from fitdesk.services.scheduling import cancel_enrollment, enroll_student
from fitdesk.utils.decorators import student_required

from . import portal_bp

BOOKING_WINDOW_DAYS = 14


def _get_schedule(schedule_id):
    schedule = (ClassSchedule.query.join(GymClass)
                .filter(ClassSchedule.id == schedule_id, GymClass.company_id == g.student.company_id)
                .first())
    if schedule is None:
        raise NotFound("Class not found")
    return schedule


@portal_bp.route("/classes", methods=["GET"])
@student_required
def bookable_classes():
    """Scheduled future occurrences of the student's gym with free places."""
    days = request.args.get("days", BOOKING_WINDOW_DAYS, type=int)
    today = date.today()
    schedules = (ClassSchedule.query.join(GymClass)
                 .filter(GymClass.company_id == g.student.company_id,
                         GymClass.is_active.is_(True),
                         ClassSchedule.status == "scheduled",
                         ClassSchedule.scheduled_date >= today,
                         ClassSchedule.scheduled_date <= today + timedelta(days=days))
                 .order_by(ClassSchedule.scheduled_date, ClassSchedule.start_time)
                 .all())

    booked = {
        e.schedule_id for e in g.student.enrollments.filter_by(status="enrolled")
    }
    result = []
    for schedule in schedules:
        if schedule.available_spots <= 0 and schedule.id not in booked:
            continue
        result.append(dict(schedule.to_dict(), is_booked=schedule.id in booked))
    return jsonify(result), 200


@portal_bp.route("/bookings", methods=["GET"])
@student_required
def my_bookings():
    enrollments = (g.student.enrollments
                   .join(ClassSchedule)
                   .filter(ClassEnrollment.status == "enrolled", ClassSchedule.scheduled_date >= date.today())
                   .order_by(ClassSchedule.scheduled_date, ClassSchedule.start_time)
                   .all())
    return jsonify([dict(e.schedule.to_dict(), enrollment_id=e.id) for e in enrollments]), 200


@portal_bp.route("/classes/<int:schedule_id>/book", methods=["POST"])
@student_required
def book_class(schedule_id):
    schedule = _get_schedule(schedule_id)
    enrollment = enroll_student(schedule, g.student)
    db.session.commit()
    return jsonify({"msg": "Class booked", "enrollment": enrollment.to_dict()}), 201


@portal_bp.route("/classes/<int:schedule_id>/cancel", methods=["POST"])
@student_required
def cancel_booking(schedule_id):
    schedule = _get_schedule(schedule_id)
    enrollment = schedule.enrollments.filter_by(student_id=g.student.id, status="enrolled").first()
    if enrollment is None:
        raise NotFound("Booking not found")
    cancel_enrollment(enrollment)
    db.session.commit()
    return jsonify({"msg": "Booking cancelled"}), 200
