from flask import Blueprint

company_bp = Blueprint("company", __name__)

from . import settings, roles, students, student_records, staff, staff_records
from . import subscriptions, payment_proofs, training, nutrition, classes, hr, password_resets
