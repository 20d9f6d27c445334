from datetime import date, timedelta

from flask import current_app, g, jsonify, request

from fitdesk.errors import ApiError, NotFound
from fitdesk.extensions import db
from fitdesk.models import ClassEnrollment, ClassSchedule, GymClass, Room
from fitdesk.schemas.classes import (FIXED_SCHEDULE_FIELDS, AttendanceSchema, ClassTypeSchema, EnrollmentSchema,
                                     GenerateSchedulesSchema, RoomSchema, ScheduleSchema,
                                     check_fixed_schedule)
from fitdesk.services.scheduling import (cancel_enrollment, cancel_schedule, create_schedule,
                                         enroll_student, generate_schedules)
from fitdesk.utils.decorators import get_company_record, permission_required, require_confirmation

from . import company_bp
from .lookups import get_child_record, get_student, optional_staff_id


def _get_schedule(schedule_id):
    return get_child_record(ClassSchedule, GymClass, schedule_id, "Class occurrence not found")


def _get_enrollment(enrollment_id):
    enrollment = (ClassEnrollment.query
                  .join(ClassSchedule)
                  .join(GymClass)
                  .filter(ClassEnrollment.id == enrollment_id, GymClass.company_id == g.company.id)
                  .first())
    if enrollment is None:
        raise NotFound("Enrolment not found")
    return enrollment


def _parse_date(value, default):
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ApiError("Invalid date", 400)


# ================================
# Rooms
# ================================

@company_bp.route("/rooms", methods=["GET"])
@permission_required("classes", "view")
def list_rooms():
    rooms = Room.query.filter_by(company_id=g.company.id).order_by(Room.name).all()
    return jsonify([room.to_dict() for room in rooms]), 200


@company_bp.route("/rooms", methods=["POST"])
@permission_required("classes", "create")
def create_room():
    data = RoomSchema().load(request.get_json() or {})
    room = Room(company_id=g.company.id, **data)
    db.session.add(room)
    db.session.commit()
    return jsonify({"msg": "Room created", "room": room.to_dict()}), 201


@company_bp.route("/rooms/<int:room_id>", methods=["PUT"])
@permission_required("classes", "edit")
def update_room(room_id):
    room = get_company_record(Room, room_id, "Room not found")
    data = RoomSchema().load(request.get_json() or {}, partial=True)
    for key, value in data.items():
        setattr(room, key, value)
    db.session.commit()
    return jsonify({"msg": "Room updated", "room": room.to_dict()}), 200


@company_bp.route("/rooms/<int:room_id>", methods=["DELETE"])
@permission_required("classes", "delete")
def delete_room(room_id):
    room = get_company_record(Room, room_id, "Room not found")
    require_confirmation()
    for gym_class in room.classes:
        gym_class.room_id = None
    db.session.delete(room)
    db.session.commit()
    return jsonify({"msg": "Room deleted"}), 200


# ================================
# Class types
# ================================

def _check_class_refs(data):
    if data.get("room_id") is not None:
        get_company_record(Room, data["room_id"], "Room not found")
    if "default_instructor_id" in data:
        data["default_instructor_id"] = optional_staff_id(data["default_instructor_id"])


@company_bp.route("/class-types", methods=["GET"])
@permission_required("classes", "view")
def list_class_types():
    classes = GymClass.query.filter_by(company_id=g.company.id).order_by(GymClass.name).all()
    return jsonify([c.to_dict() for c in classes]), 200


@company_bp.route("/class-types", methods=["POST"])
@permission_required("classes", "create")
def create_class_type():
    data = ClassTypeSchema().load(request.get_json() or {})
    _check_class_refs(data)
    gym_class = GymClass(company_id=g.company.id, **data)
    db.session.add(gym_class)
    db.session.commit()
    return jsonify({"msg": "Class created", "class": gym_class.to_dict()}), 201


@company_bp.route("/class-types/<int:class_id>", methods=["PUT"])
@permission_required("classes", "edit")
def update_class_type(class_id):
    gym_class = get_company_record(GymClass, class_id, "Class not found")
    data = ClassTypeSchema().load(request.get_json() or {}, partial=True)
    _check_class_refs(data)
    merged = {field: data.get(field, getattr(gym_class, field)) for field in FIXED_SCHEDULE_FIELDS}
    check_fixed_schedule(merged)
    for key, value in data.items():
        setattr(gym_class, key, value)
    db.session.commit()
    return jsonify({"msg": "Class updated", "class": gym_class.to_dict()}), 200


@company_bp.route("/class-types/<int:class_id>", methods=["DELETE"])
@permission_required("classes", "delete")
def delete_class_type(class_id):
    gym_class = get_company_record(GymClass, class_id, "Class not found")
    require_confirmation()
    db.session.delete(gym_class)
    db.session.commit()
    current_app.logger.info("Class %s deleted", class_id)
    return jsonify({"msg": "Class deleted"}), 200


# ================================
# Schedules and enrolments
# ================================

@company_bp.route("/schedules", methods=["GET"])
@permission_required("classes", "view")
def list_schedules():
    start = _parse_date(request.args.get("start"), date.today())
    end = _parse_date(request.args.get("end"), start + timedelta(days=6))
    query = (ClassSchedule.query.join(GymClass)
             .filter(GymClass.company_id == g.company.id,
                     ClassSchedule.scheduled_date >= start,
                     ClassSchedule.scheduled_date <= end))
    class_id = request.args.get("class_id", type=int)
    if class_id:
        query = query.filter(ClassSchedule.class_id == class_id)
    schedules = query.order_by(ClassSchedule.scheduled_date, ClassSchedule.start_time).all()
    return jsonify([s.to_dict() for s in schedules]), 200


@company_bp.route("/schedules", methods=["POST"])
@permission_required("classes", "create")
def create_class_schedule():
    data = ScheduleSchema().load(request.get_json() or {})
    gym_class = get_company_record(GymClass, data["class_id"], "Class not found")
    schedule = create_schedule(
        gym_class,
        data["scheduled_date"],
        start_time=data.get("start_time"),
        end_time=data.get("end_time"),
        instructor_id=optional_staff_id(data.get("instructor_id")),
        notes=data.get("notes"),
    )
    db.session.commit()
    return jsonify({"msg": "Class scheduled", "schedule": schedule.to_dict()}), 201


@company_bp.route("/schedules/generate", methods=["POST"])
@permission_required("classes", "create")
def generate_class_schedules():
    data = GenerateSchedulesSchema().load(request.get_json() or {})
    gym_class = get_company_record(GymClass, data["class_id"], "Class not found")
    created = generate_schedules(gym_class, data["start_date"], data["end_date"])
    db.session.commit()
    return jsonify({
        "msg": f"{len(created)} classes scheduled",
        "created": len(created),
        "schedules": [s.to_dict() for s in created],
    }), 201


@company_bp.route("/schedules/<int:schedule_id>/cancel", methods=["POST"])
@permission_required("classes", "edit")
def cancel_class_schedule(schedule_id):
    schedule = _get_schedule(schedule_id)
    cancel_schedule(schedule)
    db.session.commit()
    return jsonify({"msg": "Class cancelled", "schedule": schedule.to_dict()}), 200


@company_bp.route("/schedules/<int:schedule_id>/enrollments", methods=["GET"])
@permission_required("classes", "view")
def list_enrollments(schedule_id):
    schedule = _get_schedule(schedule_id)
    enrollments = schedule.enrollments.order_by(ClassEnrollment.enrolled_at).all()
    return jsonify([e.to_dict() for e in enrollments]), 200


@company_bp.route("/schedules/<int:schedule_id>/enrollments", methods=["POST"])
@permission_required("classes", "edit")
def enroll_in_schedule(schedule_id):
    schedule = _get_schedule(schedule_id)
    data = EnrollmentSchema().load(request.get_json() or {})
    student = get_student(data["student_id"])
    enrollment = enroll_student(schedule, student)
    db.session.commit()
    return jsonify({"msg": "Student enrolled", "enrollment": enrollment.to_dict()}), 201


@company_bp.route("/enrollments/<int:enrollment_id>/cancel", methods=["POST"])
@permission_required("classes", "edit")
def cancel_class_enrollment(enrollment_id):
    enrollment = _get_enrollment(enrollment_id)
    cancel_enrollment(enrollment)
    db.session.commit()
    return jsonify({"msg": "Enrolment cancelled", "enrollment": enrollment.to_dict()}), 200


@company_bp.route("/enrollments/<int:enrollment_id>/attendance", methods=["PUT"])
@permission_required("classes", "edit")
def mark_attendance(enrollment_id):
    enrollment = _get_enrollment(enrollment_id)
    data = AttendanceSchema().load(request.get_json() or {})
    if enrollment.status != "enrolled":
        raise ApiError("Enrolment is cancelled", 400)
    enrollment.attended = data["attended"]
    db.session.commit()
    return jsonify({"msg": "Attendance saved", "enrollment": enrollment.to_dict()}), 200
