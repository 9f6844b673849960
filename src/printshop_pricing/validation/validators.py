"""
Field validators for request input.

Each validator returns a FieldValidation instead of raising; callers
aggregate the messages and decide how to surface them.
"""
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import urlparse


EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9+\-()]{10,}$")
SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*$")
MIN_PASSWORD_LENGTH = 8


@dataclass
class FieldValidation:
    """Result of a field check."""
    is_valid: bool
    error: Optional[str] = None
    missing_fields: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.is_valid


def _is_missing(value: Any) -> bool:
    # 0 and False are real values; None, blank strings and empty containers are not
    if value is None:
        return True
    if isinstance(value, str):
        return len(value.strip()) == 0
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def validate_required(value: Any, field_name: str) -> FieldValidation:
    if _is_missing(value):
        return FieldValidation(
            is_valid=False,
            error=f"{field_name} is required and cannot be empty",
        )
    return FieldValidation(is_valid=True)


def validate_email(email: Any) -> FieldValidation:
    if not isinstance(email, str) or not EMAIL_RE.fullmatch(email):
        return FieldValidation(is_valid=False, error="Please provide a valid email address")
    return FieldValidation(is_valid=True)


def validate_password(password: Any) -> FieldValidation:
    validation = validate_required(password, "Password")
    if not validation.is_valid:
        return validation

    if len(str(password)) < MIN_PASSWORD_LENGTH:
        return FieldValidation(
            is_valid=False,
            error=f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        )
    return FieldValidation(is_valid=True)


def validate_url(url: Any) -> FieldValidation:
    """Accept anything that parses as an absolute URL (scheme plus remainder)."""
    invalid = FieldValidation(is_valid=False, error="Please provide a valid URL")
    if not isinstance(url, str) or not url.strip():
        return invalid

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return invalid

    if not parsed.scheme or not SCHEME_RE.fullmatch(parsed.scheme):
        return invalid
    if not (parsed.netloc or parsed.path):
        return invalid
    if parsed.scheme.lower() in ("http", "https", "ftp") and not parsed.netloc:
        return invalid
    return FieldValidation(is_valid=True)


def validate_phone(phone: Any) -> FieldValidation:
    """At least 10 digits or phone punctuation once whitespace is removed."""
    if not isinstance(phone, str) or not PHONE_RE.fullmatch(re.sub(r"\s", "", phone)):
        return FieldValidation(is_valid=False, error="Please provide a valid phone number")
    return FieldValidation(is_valid=True)


def validate_required_fields(data: Mapping[str, Any], required_fields: Iterable[str]) -> FieldValidation:
    missing = [name for name in required_fields if _is_missing(data.get(name))]
    if missing:
        return FieldValidation(
            is_valid=False,
            error=f"Missing required fields: {', '.join(missing)}",
            missing_fields=missing,
        )
    return FieldValidation(is_valid=True)


def collect_errors(*results: FieldValidation) -> list[str]:
    """Error messages of every failed result, in order."""
    return [r.error for r in results if not r.is_valid and r.error]
