# This project was developed with assistance from AI tools.
"""Field-level validation for guarantor data.

Pure functions that validate and normalize individual field values. Each
returns ``(ok, message, normalized)``.
"""

import re

_CURP_RE = re.compile(r"[A-Z]{4}\d{6}[HM][A-Z]{5}[A-Z0-9]\d")
_PERSON_RFC_RE = re.compile(r"[A-ZÑ&]{4}\d{6}[A-Z0-9]{3}")
_COMPANY_RFC_RE = re.compile(r"[A-ZÑ&]{3}\d{6}[A-Z0-9]{3}")


def validate_email(value: str) -> tuple[bool, str, str | None]:
    """Basic email format validation."""
    value = value.strip().lower()
    if not re.fullmatch(r"[^@\s]+@[^@\s]+\.[^@\s]+", value):
        return False, "Invalid email format", None
    return True, "", value


def validate_phone(value: str) -> tuple[bool, str, str | None]:
    """Mexican phone number: 10 digits, optionally prefixed with country code 52."""
    digits = re.sub(r"[\s\-\(\)\+\.]", "", value.strip())
    if re.fullmatch(r"52\d{10}", digits):
        digits = digits[2:]
    if not re.fullmatch(r"\d{10}", digits):
        return False, "Phone must have 10 digits", None
    return True, "", digits


def validate_curp(value: str) -> tuple[bool, str, str | None]:
    """CURP: 18 characters, national population registry key."""
    normalized = value.strip().upper()
    if len(normalized) != 18:
        return False, "CURP must have 18 characters", None
    if not _CURP_RE.fullmatch(normalized):
        return False, "Invalid CURP format", None
    return True, "", normalized


def validate_rfc(value: str) -> tuple[bool, str, str | None]:
    """Tax id of an individual (13 characters)."""
    normalized = value.strip().upper()
    if len(normalized) != 13:
        return False, "RFC must have 13 characters", None
    if not _PERSON_RFC_RE.fullmatch(normalized):
        return False, "Invalid RFC format", None
    return True, "", normalized


def validate_company_rfc(value: str) -> tuple[bool, str, str | None]:
    """Tax id of a company (12 characters)."""
    normalized = value.strip().upper()
    if len(normalized) != 12:
        return False, "Company RFC must have 12 characters", None
    if not _COMPANY_RFC_RE.fullmatch(normalized):
        return False, "Invalid company RFC format", None
    return True, "", normalized


# Validators applied to incoming patches, keyed by field name.
FIELD_VALIDATORS = {
    "email": validate_email,
    "personal_email": validate_email,
    "work_email": validate_email,
    "legal_rep_email": validate_email,
    "phone": validate_phone,
    "work_phone": validate_phone,
    "legal_rep_phone": validate_phone,
    "curp": validate_curp,
    "spouse_curp": validate_curp,
    "rfc": validate_rfc,
    "spouse_rfc": validate_rfc,
    "legal_rep_rfc": validate_rfc,
    "company_rfc": validate_company_rfc,
}
