"""Validation subpackage - request field guards."""
from .validators import (
    FieldValidation,
    validate_required,
    validate_email,
    validate_password,
    validate_url,
    validate_phone,
    validate_required_fields,
    collect_errors,
)

__all__ = [
    'FieldValidation',
    'validate_required',
    'validate_email',
    'validate_password',
    'validate_url',
    'validate_phone',
    'validate_required_fields',
    'collect_errors',
]
