"""Staff removal, work schedules, absences, leave balances and payroll."""
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal

from sqlalchemy import func

from fitdesk.errors import ApiError
from fitdesk.extensions import db
from fitdesk.models import (ClassSchedule, GymClass, StaffAbsence, StaffLeaveBalance, StaffWorkSchedule,
                            Student, StudentSubscription, SubscriptionPayment)
from fitdesk.models.staff_schedule import DEFAULT_PERSONAL_DAYS, DEFAULT_VACATION_DAYS
from fitdesk.services.accounts import delete_user

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def remove_staff_member(member):
    """Delete a staff member and their login; returns the stored document paths to remove."""
    paths = [doc.file_path for doc in member.documents]
    for student in member.students:
        student.personal_trainer_id = None
    GymClass.query.filter_by(default_instructor_id=member.id).update({"default_instructor_id": None})
    ClassSchedule.query.filter_by(instructor_id=member.id).update({"instructor_id": None})

    user = member.user
    if user is not None:
        delete_user(user)
    db.session.delete(member)
    logger.info("Staff member %s removed", member.id)
    return paths


# ---------------- Work schedule ----------------
def replace_work_schedule(member, days):
    """Replace the weekly schedule with ``days`` (dicts with day_of_week, start_time, end_time)."""
    seen = set()
    for day in days:
        if day["day_of_week"] in seen:
            raise ApiError("Each day can only appear once", 400)
        seen.add(day["day_of_week"])

    # old rows go first so the per-day unique constraint holds
    member.work_schedule = []
    db.session.flush()
    member.work_schedule = [
        StaffWorkSchedule(company_id=member.company_id, day_of_week=day["day_of_week"],
                          start_time=day["start_time"], end_time=day["end_time"])
        for day in sorted(days, key=lambda d: d["day_of_week"])
    ]
    db.session.flush()
    return member.work_schedule


def scheduled_weekly_hours(member):
    return round(sum(day.hours for day in member.work_schedule), 2)


# ---------------- Absences ----------------
def _overlapping(member, start_date, end_date):
    return member.absences.filter(
        StaffAbsence.status.in_(("pending", "approved")),
        StaffAbsence.start_date <= end_date,
        StaffAbsence.end_date >= start_date,
    ).first()


def create_absence(member, data):
    if _overlapping(member, data["start_date"], data["end_date"]):
        raise ApiError("This staff member already has an absence in that period", 409)
    absence = StaffAbsence(
        company_id=member.company_id,
        staff=member,
        absence_type=data["absence_type"],
        start_date=data["start_date"],
        end_date=data["end_date"],
        total_days=(data["end_date"] - data["start_date"]).days + 1,
        reason=data.get("reason"),
        status="pending",
    )
    db.session.add(absence)
    db.session.flush()
    return absence


def review_absence(absence, status, reviewer):
    if absence.status != "pending":
        raise ApiError("This absence was already reviewed", 409)
    absence.status = status
    absence.reviewed_at = datetime.utcnow()
    absence.reviewed_by = reviewer.id
    logger.info("Absence %s %s", absence.id, status)
    return absence


# ---------------- Leave balance ----------------
def _days_in_year(absence, year):
    start = max(absence.start_date, date(year, 1, 1))
    end = min(absence.end_date, date(year, 12, 31))
    return max((end - start).days + 1, 0)


def leave_balance(member, year):
    balance = member.leave_balances.filter_by(year=year).first()
    vacation_entitled = balance.vacation_days_entitled if balance else DEFAULT_VACATION_DAYS
    personal_entitled = balance.personal_days_entitled if balance else DEFAULT_PERSONAL_DAYS

    used = {"vacation": 0, "sick": 0, "personal": 0}
    approved = member.absences.filter(
        StaffAbsence.status == "approved",
        StaffAbsence.absence_type.in_(tuple(used)),
        StaffAbsence.start_date <= date(year, 12, 31),
        StaffAbsence.end_date >= date(year, 1, 1),
    )
    for absence in approved:
        used[absence.absence_type] += _days_in_year(absence, year)

    return {
        "staff_id": member.id,
        "year": year,
        "vacation_days_entitled": vacation_entitled,
        "vacation_days_used": used["vacation"],
        "vacation_days_remaining": vacation_entitled - used["vacation"],
        "personal_days_entitled": personal_entitled,
        "personal_days_used": used["personal"],
        "personal_days_remaining": personal_entitled - used["personal"],
        "sick_days_used": used["sick"],
    }


def set_leave_entitlement(member, year, vacation_days=None, personal_days=None):
    balance = member.leave_balances.filter_by(year=year).first()
    if balance is None:
        balance = StaffLeaveBalance(company_id=member.company_id, staff=member, year=year)
        db.session.add(balance)
    if vacation_days is not None:
        balance.vacation_days_entitled = vacation_days
    if personal_days is not None:
        balance.personal_days_entitled = personal_days
    db.session.flush()
    return balance


# ---------------- Payroll ----------------
def _worked_days(member, start_date, end_date):
    """Scheduled working days in the period that no approved absence covers."""
    schedule = {day.day_of_week: day for day in member.work_schedule}
    absences = member.absences.filter(
        StaffAbsence.status == "approved",
        StaffAbsence.start_date <= end_date,
        StaffAbsence.end_date >= start_date,
    ).all()

    days, hours = 0, 0.0
    current = start_date
    while current <= end_date:
        work_day = schedule.get(current.weekday())
        if work_day is not None and not any(a.covers(current) for a in absences):
            days += 1
            hours += work_day.hours
        current += timedelta(days=1)
    return days, round(hours, 2)


def _classes_given(member, start_date, end_date, today=None):
    last_day = min(end_date, today or date.today())
    return (ClassSchedule.query
            .filter(ClassSchedule.instructor_id == member.id,
                    ClassSchedule.status != "cancelled",
                    ClassSchedule.scheduled_date >= start_date,
                    ClassSchedule.scheduled_date <= last_day)
            .count())


def _revenue_from_students(member, start_date, end_date):
    start_dt = datetime.combine(start_date, datetime.min.time())
    end_dt = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
    total = (SubscriptionPayment.query
             .join(StudentSubscription)
             .join(Student)
             .filter(Student.personal_trainer_id == member.id,
                     SubscriptionPayment.status == "paid",
                     SubscriptionPayment.paid_at >= start_dt,
                     SubscriptionPayment.paid_at < end_dt)
             .with_entities(func.coalesce(func.sum(SubscriptionPayment.amount), 0))
             .scalar())
    return Decimal(str(total or 0))


def _money(value):
    return float(Decimal(value).quantize(CENT))


def _rate(config, name):
    if config is None:
        return Decimal("0")
    return Decimal(str(getattr(config, name) or 0))


def payroll_item(member, start_date, end_date, today=None):
    config = member.payment_config
    payment_type = config.payment_type if config else None

    days_worked, hours_worked = _worked_days(member, start_date, end_date)
    classes_count = _classes_given(member, start_date, end_date, today)
    base_salary = classes_value = hours_value = commission = Decimal("0")

    if payment_type == "monthly":
        base_salary = _rate(config, "base_salary")
    elif payment_type == "hourly":
        hours_value = Decimal(str(hours_worked)) * _rate(config, "hourly_rate")
    elif payment_type == "daily":
        hours_value = days_worked * _rate(config, "daily_rate")
    elif payment_type == "per_class":
        classes_value = classes_count * _rate(config, "per_class_rate")
    elif payment_type == "commission":
        commission = _revenue_from_students(member, start_date, end_date) * _rate(config, "commission_percentage") / 100

    # instructors on other contracts still earn the class rate when one is set
    if payment_type not in (None, "per_class") and classes_count and _rate(config, "per_class_rate"):
        classes_value = classes_count * _rate(config, "per_class_rate")

    total = base_salary + classes_value + hours_value + commission
    return {
        "staff_id": member.id,
        "staff_name": member.full_name,
        "position": member.position,
        "payment_type": payment_type,
        "days_worked": days_worked,
        "hours_worked": hours_worked,
        "classes_count": classes_count,
        "base_salary": _money(base_salary),
        "classes_value": _money(classes_value),
        "hours_value": _money(hours_value),
        "commission": _money(commission),
        "total": _money(total),
    }


def calculate_payroll(members, start_date, end_date, today=None):
    items = [payroll_item(member, start_date, end_date, today) for member in members]
    return {
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "items": items,
        "total": round(sum(item["total"] for item in items), 2),
    }
