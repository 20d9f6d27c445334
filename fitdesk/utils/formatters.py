"""Portuguese (pt-PT) number and date formatting."""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation


def _to_number(value):
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return parse_number(value)
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def format_number(value, decimals=2):
    """1234.5 -> '1.234,50'"""
    number = _to_number(value)
    if number is None:
        return ""
    formatted = f"{number:,.{decimals}f}"
    return formatted.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_currency(value):
    return format_number(value, 2)


def parse_number(value):
    """'1.234,56' -> Decimal('1234.56'); None for blank or invalid input."""
    if value is None:
        return None
    if not isinstance(value, str):
        return Decimal(str(value))
    text = value.strip()
    if not text:
        return None
    normalized = text.replace(".", "").replace(",", ".")
    try:
        return Decimal(normalized)
    except InvalidOperation:
        return None


def parse_currency(value):
    number = parse_number(value)
    return number if number is not None else Decimal("0")


def format_date_pt(value):
    """Date or 'YYYY-MM-DD' -> 'DD/MM/YYYY'."""
    if not value:
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    parts = str(value).split("-")
    if len(parts) != 3:
        return str(value)
    year, month, day = parts
    return f"{day[:2]}/{month}/{year}"


def parse_date_pt(value):
    """'DD/MM/YYYY' -> date; None when the value cannot be parsed."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%d/%m/%Y").date()
    except ValueError:
        return None
