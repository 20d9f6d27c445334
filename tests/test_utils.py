from datetime import date
from decimal import Decimal

import pytest

from fitdesk.utils.calculations import (add_months, age_from_birth_date, average_score, bmi, bmi_category,
                                        certificate_status, days_remaining, percentage_of)
from fitdesk.utils.formatters import (format_currency, format_date_pt, format_number, parse_currency,
                                      parse_date_pt, parse_number)
from fitdesk.utils.security import generate_registration_code, generate_temporary_password, validate_password


@pytest.mark.parametrize("value, expected", [
    (1234.56, "1.234,56"),
    (0, "0,00"),
    ("1.234,5", "1.234,50"),
    (None, ""),
    ("abc", ""),
])
def test_format_currency(value, expected):
    assert format_currency(value) == expected


def test_format_number_decimals():
    assert format_number(1234567.891, 1) == "1.234.567,9"


def test_parse_numbers():
    assert parse_number("1.234,56") == Decimal("1234.56")
    assert parse_number("") is None
    assert parse_number("x") is None
    assert parse_currency("") == Decimal("0")


def test_portuguese_dates():
    assert format_date_pt(date(2026, 3, 9)) == "09/03/2026"
    assert format_date_pt("2026-03-09") == "09/03/2026"
    assert format_date_pt(None) == ""
    assert parse_date_pt("9/3/2026") == date(2026, 3, 9)
    assert parse_date_pt("31/02/2026") is None


def test_age_before_and_after_birthday():
    assert age_from_birth_date(date(2000, 6, 15), today=date(2026, 6, 14)) == 25
    assert age_from_birth_date(date(2000, 6, 15), today=date(2026, 6, 15)) == 26
    assert age_from_birth_date(None) is None


def test_bmi_and_category():
    assert bmi(70, 175) == 22.9
    assert bmi_category(22.9) == "normal"
    assert bmi_category(17) == "underweight"
    assert bmi_category(31) == "obese"
    assert bmi(None, 175) is None


def test_average_score_skips_unrated():
    assert average_score([8, 0, None, 6]) == 7.0
    assert average_score([0, None]) == 0


def test_days_remaining_never_negative():
    assert days_remaining(date(2026, 1, 10), today=date(2026, 1, 1)) == 9
    assert days_remaining(date(2025, 12, 1), today=date(2026, 1, 1)) == 0


def test_certificate_status():
    today = date(2026, 1, 1)
    assert certificate_status(date(2025, 12, 31), today=today) == "expired"
    assert certificate_status(date(2026, 1, 31), today=today) == "expiring"
    assert certificate_status(date(2026, 6, 1), today=today) == "valid"
    assert certificate_status(None) is None


def test_add_months_clamps_to_month_end():
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)


def test_percentage_of_zero_target():
    assert percentage_of(500, 0) == 0
    assert percentage_of(500, 2000) == 25


@pytest.mark.parametrize("password, valid", [
    ("Passw0rd", True),
    ("short1A", False),
    ("alllowercase1", False),
    ("ALLUPPERCASE1", False),
    ("NoDigitsHere", False),
])
def test_validate_password(app, password, valid):
    assert validate_password(password)[0] is valid


def test_temporary_password_satisfies_policy(app):
    password = generate_temporary_password()

    assert len(password) == 16
    assert validate_password(password)[0]


def test_registration_code_shape():
    code = generate_registration_code()

    assert len(code) == 8
    assert code.isupper() or code.isdigit()


def test_formatters_registered_as_template_filters(app):
    from flask import render_template_string

    with app.test_request_context():
        rendered = render_template_string("{{ 1234.5|currency }} {{ d|date_pt }}", d=date(2026, 3, 9))

    assert rendered == "1.234,50 09/03/2026"
