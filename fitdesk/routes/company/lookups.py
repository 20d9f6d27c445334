from flask import g

from fitdesk.errors import NotFound
from fitdesk.models import Staff, Student
from fitdesk.utils.decorators import get_company_record


def get_student(student_id):
    return get_company_record(Student, student_id, "Student not found")


def get_staff(staff_id):
    return get_company_record(Staff, staff_id, "Staff member not found")


def get_child_record(model, parent_model, record_id, msg="Not found"):
    """Fetch a row whose parent carries the company id (plan days, exercises...)."""
    record = (model.query.join(parent_model)
              .filter(model.id == record_id, parent_model.company_id == g.company.id)
              .first())
    if record is None:
        raise NotFound(msg)
    return record


def optional_staff_id(staff_id):
    """Validate that an optional staff id belongs to the caller's company."""
    if staff_id is None:
        return None
    return get_staff(staff_id).id
