import re

from marshmallow import EXCLUDE, ValidationError, fields, pre_load, validate

from fitdesk.extensions import ma
from fitdesk.utils.security import validate_password

NIF_RE = re.compile(r"^\d{9}$")
NISS_RE = re.compile(r"^\d{11}$")
PHONE_RE = re.compile(r"^\+?[\d\s]{9,15}$")
IBAN_RE = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{11,30}$")


class BaseSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    @pre_load
    def blank_strings_to_none(self, data, **kwargs):
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, str):
                value = value.strip()
                if value == "":
                    value = None
            cleaned[key] = value
        return cleaned


def required_text(label, **kwargs):
    validators = [validate.Length(min=1, error=f"{label} is required")]
    extra = kwargs.pop("validate", None)
    if extra is not None:
        validators.append(extra)
    return fields.String(
        required=True,
        validate=validators,
        error_messages={"required": f"{label} is required", "null": f"{label} is required"},
        **kwargs,
    )


def optional_email():
    return fields.Email(allow_none=True, error_messages={"invalid": "Invalid email format"})


def _regex_validator(pattern, message, normalize=None):
    def check(value):
        if value is None:
            return
        candidate = normalize(value) if normalize else value
        if not pattern.match(candidate):
            raise ValidationError(message)
    return check


validate_nif = _regex_validator(NIF_RE, "NIF must have 9 digits")
validate_niss = _regex_validator(NISS_RE, "NISS must have 11 digits")
validate_phone = _regex_validator(PHONE_RE, "Invalid phone number")
validate_iban = _regex_validator(IBAN_RE, "Invalid IBAN", normalize=lambda v: v.replace(" ", "").upper())


def validate_password_policy(value):
    is_valid, msg = validate_password(value)
    if not is_valid:
        raise ValidationError(msg)


def validate_half_step(value):
    if value is None:
        return
    if value < 0 or value > 10:
        raise ValidationError("Score must be between 0 and 10")
    if (value * 2) != int(value * 2):
        raise ValidationError("Score must be a multiple of 0.5")
