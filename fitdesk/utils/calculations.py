"""Derived values shown next to stored records.

All helpers accept ``None`` where the underlying column is nullable and
return ``None`` (or a neutral value) instead of raising.
"""
from datetime import date, timedelta

CERTIFICATE_EXPIRING_DAYS = 30

MACRO_KEYS = ("calories", "protein", "carbs", "fat")


def age_from_birth_date(birth_date, today=None):
    """Full years between ``birth_date`` and ``today``."""
    if not birth_date:
        return None
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def bmi(weight_kg, height_cm):
    """Body mass index rounded to one decimal place."""
    if not weight_kg or not height_cm:
        return None
    height_m = height_cm / 100
    return round(weight_kg / (height_m * height_m), 1)


def bmi_category(value):
    if value is None:
        return None
    if value < 18.5:
        return "underweight"
    if value < 25:
        return "normal"
    if value < 30:
        return "overweight"
    return "obese"


def average_score(scores):
    """Mean of the non-zero scores, rounded to one decimal; 0 when there are none."""
    rated = [float(s) for s in scores if s]
    if not rated:
        return 0
    return round(sum(rated) / len(rated), 1)


def score_band(score):
    if score >= 8:
        return "excellent"
    if score >= 6:
        return "good"
    if score >= 4:
        return "fair"
    return "poor"


def days_remaining(end_date, today=None):
    """Days left until ``end_date``; never negative."""
    if not end_date:
        return None
    today = today or date.today()
    return max((end_date - today).days, 0)


def macro_totals(meals):
    totals = {key: 0.0 for key in MACRO_KEYS}
    for meal in meals:
        for key in MACRO_KEYS:
            value = meal.get(key) if isinstance(meal, dict) else getattr(meal, key, None)
            totals[key] += float(value or 0)
    return {key: round(value, 1) for key, value in totals.items()}


def percentage_of(value, target):
    if not target:
        return 0
    return round(value / target * 100)


def certificate_status(expiry_date, today=None):
    """expired / expiring (within 30 days) / valid; None without an expiry date."""
    if not expiry_date:
        return None
    today = today or date.today()
    if expiry_date < today:
        return "expired"
    if expiry_date <= today + timedelta(days=CERTIFICATE_EXPIRING_DAYS):
        return "expiring"
    return "valid"


def add_months(start, months):
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    for day in (start.day, 30, 29, 28):
        try:
            return start.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    raise ValueError("invalid date")
