import re
import secrets
import string

from flask import current_app

SPECIAL_CHARACTERS = "!@#$%^&*"
REGISTRATION_CODE_ALPHABET = string.ascii_uppercase + string.digits


def validate_password(password):
    """Validate password strength."""
    min_length = current_app.config.get("PASSWORD_MIN_LENGTH", 8)
    max_length = current_app.config.get("PASSWORD_MAX_LENGTH", 72)
    if not password or len(password) < min_length:
        return False, f"Password must be at least {min_length} characters"
    if len(password) > max_length:
        return False, f"Password must be at most {max_length} characters"
    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"
    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"
    if not re.search(r"\d", password):
        return False, "Password must contain at least one number"
    return True, "Password is valid"


def generate_temporary_password(length=None):
    """Random password with at least one lower, upper, digit and special character."""
    length = length or current_app.config.get("TEMPORARY_PASSWORD_LENGTH", 16)
    pools = [string.ascii_lowercase, string.ascii_uppercase, string.digits, SPECIAL_CHARACTERS]
    alphabet = "".join(pools)
    chars = [secrets.choice(pool) for pool in pools]
    chars += [secrets.choice(alphabet) for _ in range(length - len(chars))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


def generate_registration_code(length=8):
    return "".join(secrets.choice(REGISTRATION_CODE_ALPHABET) for _ in range(length))
