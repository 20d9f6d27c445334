"""CSV import and export of the student list."""
import csv
import io
import logging

from marshmallow import ValidationError

from fitdesk.errors import first_error
from fitdesk.extensions import db
from fitdesk.models import Student
from fitdesk.models.student import STATUS_LABELS
from fitdesk.schemas.student import StudentSchema
from fitdesk.utils.formatters import format_date_pt, parse_date_pt

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = (
    ("full_name", "Full name"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("birth_date", "Birth date"),
    ("nif", "NIF"),
    ("city", "City"),
    ("status", "Status"),
    ("enrollment_date", "Enrollment date"),
)
DATE_COLUMNS = ("birth_date", "enrollment_date")


def _normalize_row(row):
    data = {}
    for key, value in row.items():
        if key is None:
            continue
        key = key.strip().lower()
        value = (value or "").strip()
        if key in DATE_COLUMNS and "/" in value:
            parsed = parse_date_pt(value)
            value = parsed.isoformat() if parsed else value
        data[key] = value
    return data


def import_students(company, text):
    """Create students from CSV text; returns (created students, row errors)."""
    schema = StudentSchema()
    reader = csv.DictReader(io.StringIO(text))
    created, errors = [], []
    for line_number, row in enumerate(reader, start=2):
        try:
            data = schema.load(_normalize_row(row))
        except ValidationError as err:
            errors.append({"row": line_number, "msg": first_error(err.messages)})
            continue
        data.pop("status", None)
        data.pop("personal_trainer_id", None)
        student = Student(company_id=company.id, registration_method="company_added", status="active", **data)
        db.session.add(student)
        created.append(student)
    db.session.flush()
    logger.info("Imported %s students into company %s (%s rows rejected)", len(created), company.id, len(errors))
    return created, errors


def export_students(students):
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([label for _, label in EXPORT_COLUMNS])
    for student in students:
        row = []
        for key, _ in EXPORT_COLUMNS:
            value = getattr(student, key)
            if key in DATE_COLUMNS:
                value = format_date_pt(value)
            elif key == "status":
                value = STATUS_LABELS.get(value, value)
            row.append(value or "")
        writer.writerow(row)
    output.seek(0)
    return output.getvalue()
