"""
Record-Spec: declarative validation for plain data records.

Records are checked against field descriptions, mappings of field name to
rules, and every failure is reported as a FieldError.
"""

from .models import (
    ARRAY_VALIDATOR_KEY,
    ARRAY_VALIDATOR_KEYS,
    FIELD_CONFIG_KEY,
    LEGACY_ARRAY_VALIDATOR_KEY,
    PRIMITIVE_TAGS,
    FieldError,
    PredicateOutcome,
    TypeKind,
    TypeSpec,
)
from .loader import DescriptionError, load_description, parse_description

__version__ = "1.0.0"
__all__ = [
    "ARRAY_VALIDATOR_KEY",
    "ARRAY_VALIDATOR_KEYS",
    "FIELD_CONFIG_KEY",
    "LEGACY_ARRAY_VALIDATOR_KEY",
    "PRIMITIVE_TAGS",
    "FieldError",
    "PredicateOutcome",
    "TypeKind",
    "TypeSpec",
    "DescriptionError",
    "load_description",
    "parse_description",
]
