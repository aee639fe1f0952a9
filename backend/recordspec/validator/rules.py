"""
Field Rules.

Handlers for every rule key a field description may declare:
- required / required_depends_on / at_least_one_of (presence)
- minLength / maxLength (length bounds)
- regexp (pattern match)
- equal / oneof (allowed values)
- array / array_items (array structure and contents)
- shapeOf / arrayOfShapes (object shapes, see shapes.py)

Each handler returns a single FieldError or None. Rules other than the
presence rules ignore falsy values.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any, Optional, Pattern, Sequence, Union

from ..models import FIELD_CONFIG_KEY, FieldError
from .registry import default_registry
from .shapes import is_falsy, strict_equals, validate_shape, validate_shape_array

MISSING_FIELD = "Missing required field"


def _has_array_rule(context: Mapping[str, Any]) -> bool:
    """Check whether the field under validation also declares array rules."""
    field_config = context.get(FIELD_CONFIG_KEY) or {}
    return bool(field_config.get("array") or field_config.get("array_items"))


def _check_present(field: str, value: Any, context: Mapping[str, Any]) -> Optional[FieldError]:
    if is_falsy(value):
        return FieldError(field, MISSING_FIELD)
    # Empty lists only count as missing for fields declared as arrays
    if _has_array_rule(context) and isinstance(value, (list, tuple)) and not value:
        return FieldError(field, MISSING_FIELD)
    return None


def _condition_met(condition: Optional[Mapping[str, Any]], context: Mapping[str, Any]) -> bool:
    """Evaluate a ``{key, value}`` dependency against the record."""
    if not condition:
        return True
    return strict_equals(context.get(condition.get("key")), condition.get("value"))


@default_registry.rule("required")
def validate_required(
    field: str,
    value: Any,
    options: Optional[bool],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    """Check that a field is present and not empty."""
    if not options:
        return None
    return _check_present(field, value, context)


@default_registry.rule("required_depends_on")
def validate_required_depends_on(
    field: str,
    value: Any,
    options: Optional[Mapping[str, Any]],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    """
    Require a field only when another field holds a given value.

    Options format: ``{"key": "other_field", "value": "expected"}``.
    """
    if not options:
        return None
    if not _condition_met(options, context):
        return None
    return _check_present(field, value, context)


@default_registry.rule("minLength")
def validate_min_length(
    field: str,
    value: Any,
    options: Optional[int],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    if not is_falsy(value) and options and len(str(value)) < options:
        return FieldError(field, "Field value is too short")
    return None


@default_registry.rule("maxLength")
def validate_max_length(
    field: str,
    value: Any,
    options: Optional[int],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    if not is_falsy(value) and options and len(str(value)) > options:
        return FieldError(field, "Field value is too long")
    return None


@default_registry.rule("regexp")
def validate_regexp(
    field: str,
    value: Any,
    options: Optional[Union[str, Pattern]],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    """Check the field against a regular expression (search semantics)."""
    if is_falsy(value) or not options:
        return None
    pattern = options if isinstance(options, re.Pattern) else re.compile(options)
    if not pattern.search(str(value)):
        return FieldError(field, "Field doesn't match the required pattern")
    return None


@default_registry.rule("equal")
def validate_equal(
    field: str,
    value: Any,
    options: Any,
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    if not is_falsy(value) and not is_falsy(options) and not strict_equals(value, options):
        return FieldError(field, "Field value is not equal to expected value")
    return None


@default_registry.rule("oneof")
def validate_oneof(
    field: str,
    value: Any,
    options: Optional[Sequence[Any]],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    if is_falsy(value) or not options:
        return None
    if not any(strict_equals(value, allowed) for allowed in options):
        return FieldError(field, "Field value is not one of the expected values")
    return None


@default_registry.rule("array")
def validate_array(
    field: str,
    value: Any,
    options: Optional[bool],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    """
    Check that the field is an array.

    Emptiness is the concern of ``required``, which treats an empty array as
    missing when this rule is declared.
    """
    if not options:
        return None
    if not is_falsy(value) and not isinstance(value, (list, tuple)):
        return FieldError(field, "Field must be an array")
    return None


def _canonical(item: Any) -> Optional[str]:
    try:
        return json.dumps(item, sort_keys=True)
    except (TypeError, ValueError):
        return None


def _items_match(item: Any, allowed: Any) -> bool:
    if isinstance(item, (str, bool, int, float)):
        return strict_equals(item, allowed)
    encoded = _canonical(item)
    return encoded is not None and encoded == _canonical(allowed)


def _render_item(item: Any) -> str:
    try:
        return json.dumps(item)
    except (TypeError, ValueError):
        return repr(item)


@default_registry.rule("array_items")
def validate_array_items(
    field: str,
    value: Any,
    options: Optional[Sequence[Any]],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    """
    Check that every array item is one of the allowed items.

    Primitives are compared strictly, objects by their JSON encoding.
    """
    if is_falsy(value) or not options:
        return None

    if not isinstance(value, (list, tuple)):
        return FieldError(field, "Field must be an array to validate items")

    invalid = [
        item for item in value
        if not any(_items_match(item, allowed) for allowed in options)
    ]
    if invalid:
        rendered = ", ".join(_render_item(item) for item in invalid)
        return FieldError(field, f"Array contains invalid items: {rendered}")
    return None


def _has_value(value: Any) -> bool:
    """False and 0 are answers; None, "" and empty arrays are not."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


@default_registry.rule("at_least_one_of")
def validate_at_least_one_of(
    field: str,
    value: Any,
    options: Optional[Mapping[str, Any]],
    context: Mapping[str, Any],
) -> Optional[FieldError]:
    """
    Require at least one of a group of fields to hold a value.

    Options format::

        {
            "fields": ["contact_email", "contact_phone"],
            "required_depends_on": {"key": "has_contact", "value": "yes"},  # optional
        }
    """
    if not options:
        return None
    if not _condition_met(options.get("required_depends_on"), context):
        return None
    if any(_has_value(context.get(name)) for name in options.get("fields", [])):
        return None
    return FieldError(field, "At least one must be selected")


default_registry.register("shapeOf", validate_shape)
default_registry.register("arrayOfShapes", validate_shape_array)
