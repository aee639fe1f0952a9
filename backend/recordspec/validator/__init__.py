"""
Record-Spec Validation Engine.

This package validates data records against field descriptions:
- Shape rules: shapeOf / arrayOfShapes (object and array-of-object shapes)
- Field rules: presence, length, pattern, allowed values, arrays
- Rule registry: rule key to handler table used by the engine
"""

from .shapes import (
    check_properties,
    check_type,
    resolve_type_spec,
    run_predicate,
    type_tag,
    validate_shape,
    validate_shape_array,
)
from .registry import RuleHandler, RuleRegistry, default_registry
from .rules import (
    validate_array,
    validate_array_items,
    validate_at_least_one_of,
    validate_equal,
    validate_max_length,
    validate_min_length,
    validate_oneof,
    validate_regexp,
    validate_required,
    validate_required_depends_on,
)
from .engine import ValidationEngine, ValidationResult, validate

__all__ = [
    # Shape rules
    "validate_shape",
    "validate_shape_array",
    "check_properties",
    "check_type",
    "resolve_type_spec",
    "run_predicate",
    "type_tag",
    # Field rules
    "validate_required",
    "validate_required_depends_on",
    "validate_min_length",
    "validate_max_length",
    "validate_regexp",
    "validate_equal",
    "validate_oneof",
    "validate_array",
    "validate_array_items",
    "validate_at_least_one_of",
    # Registry
    "RuleHandler",
    "RuleRegistry",
    "default_registry",
    # Engine
    "ValidationEngine",
    "ValidationResult",
    "validate",
]
