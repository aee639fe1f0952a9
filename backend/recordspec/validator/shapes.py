"""
Shape Validation.

Validates object values, and arrays of object values, against a shape
descriptor:

    {
        "shape": {"code": "string", "type": ["EAN8", "EAN13"], "qty": ["number", "string"]},
        "required": ["code"],
        "validators": {"code": is_valid_code, "arrayPredicate": lambda items: len(items) <= 10},
    }

Each call reports at most one error and stops at the first violation.
"""

from __future__ import annotations

import numbers
from collections.abc import Mapping
from functools import partial
from typing import Any, Callable, Optional, Sequence

from ..models import (
    ARRAY_VALIDATOR_KEY,
    ARRAY_VALIDATOR_KEYS,
    LEGACY_ARRAY_VALIDATOR_KEY,
    PRIMITIVE_TAGS,
    FieldError,
    Predicate,
    PredicateOutcome,
    TypeKind,
    TypeSpec,
)

Locator = Callable[[str], str]


def is_falsy(value: Any) -> bool:
    """
    Check whether a value counts as "not provided" for opt-in rules.

    None, False, empty strings, zero and NaN are falsy. Containers are never
    falsy, so an empty mapping still gets its required properties checked.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def is_missing(value: Any) -> bool:
    """A property is missing when absent, None or an empty string."""
    return value is None or (isinstance(value, str) and value == "")


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that keeps booleans apart from numbers (True is not 1)."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    return left == right


def type_tag(value: Any) -> str:
    """Return the runtime type tag compared against shape type specs."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return "object"
    if value is None:
        return "null"
    if callable(value):
        return "function"
    return type(value).__name__


def resolve_type_spec(spec: Any) -> TypeSpec:
    """
    Resolve a shape entry into a TypeSpec.

    Args:
        spec: A primitive tag string, a sequence or set of literals or tags,
            or an explicit ``{"enum": [...]}`` / ``{"type": ...}`` mapping.

    Returns:
        The resolved TypeSpec.

    A sequence made only of primitive tags is read as type alternatives, so
    ``["string", "number"]`` never means the literals "string" and "number".
    Use ``{"enum": [...]}`` for that. Sets are sorted before resolution.
    """
    if isinstance(spec, str):
        return TypeSpec(TypeKind.PRIMITIVE, (spec,))

    if isinstance(spec, (set, frozenset)):
        # Sets have no order; sort them so messages are stable
        spec = sorted(spec, key=str)

    if isinstance(spec, Mapping):
        if "enum" in spec:
            return TypeSpec(TypeKind.ENUM, tuple(spec["enum"]))
        if "type" in spec:
            declared = spec["type"]
            if isinstance(declared, str):
                return TypeSpec(TypeKind.PRIMITIVE, (declared,))
            if isinstance(declared, (set, frozenset)):
                declared = sorted(declared, key=str)
            return TypeSpec(TypeKind.ALTERNATIVES, tuple(declared))
        raise TypeError(f"Shape entry needs an 'enum' or 'type' key, got {dict(spec)!r}")

    if isinstance(spec, (list, tuple)):
        values = tuple(spec)
        if values and all(isinstance(v, str) and v in PRIMITIVE_TAGS for v in values):
            return TypeSpec(TypeKind.ALTERNATIVES, values)
        return TypeSpec(TypeKind.ENUM, values)

    raise TypeError(f"Unsupported shape entry: {spec!r}")


def check_type(name: str, value: Any, spec: TypeSpec) -> Optional[str]:
    """Return an error message when ``value`` does not satisfy ``spec``."""
    if spec.kind == TypeKind.ENUM:
        if any(strict_equals(value, allowed) for allowed in spec.values):
            return None
        allowed = ", ".join(str(v) for v in spec.values)
        return f'Property "{name}" must be one of: {allowed}'

    actual = type_tag(value)
    if actual in spec.values:
        return None
    expected = " or ".join(spec.values)
    return f'Property "{name}" must be of type {expected}, got {actual}'


def _describe_fault(exc: Exception) -> str:
    try:
        message = str(exc)
    except Exception:
        message = ""
    return message or "Unknown error"


def run_predicate(predicate: Predicate, value: Any) -> PredicateOutcome:
    """
    Run a caller-supplied predicate, capturing anything it raises.

    Args:
        predicate: Callable returning a truthy value when ``value`` is valid.
        value: The property value, or the whole array for array predicates.

    Returns:
        PredicateOutcome; ``fault`` is set when the predicate raised.
    """
    try:
        return PredicateOutcome(passed=bool(predicate(value)))
    except Exception as exc:
        return PredicateOutcome(passed=False, fault=_describe_fault(exc))


def check_properties(
    obj: Mapping[str, Any],
    descriptor: Mapping[str, Any],
    locate_property: Locator,
    locate_predicate: Locator,
) -> Optional[FieldError]:
    """
    Check one mapping against a descriptor's required set, shape and
    property predicates.

    Args:
        obj: The mapping under validation.
        descriptor: Shape descriptor.
        locate_property: Builds the error location for required, type and
            enum failures of a property.
        locate_predicate: Builds the error location for predicate failures.

    Returns:
        The first FieldError found, or None.
    """
    shape = descriptor.get("shape") or {}
    required: Sequence[str] = descriptor.get("required") or ()
    validators = descriptor.get("validators") or {}

    for name in required:
        if is_missing(obj.get(name)):
            return FieldError(locate_property(name), f"Missing required property: {name}")

    for name, raw_spec in shape.items():
        prop = obj.get(name)

        if is_missing(prop):
            if name in required:
                return FieldError(locate_property(name), f"Missing required property: {name}")
            continue

        message = check_type(name, prop, resolve_type_spec(raw_spec))
        if message:
            return FieldError(locate_property(name), message)

        predicate = validators.get(name) if name not in ARRAY_VALIDATOR_KEYS else None
        if not callable(predicate):
            continue

        outcome = run_predicate(predicate, prop)
        if outcome.faulted:
            return FieldError(
                locate_predicate(name),
                f'Property "{name}" validation error: {outcome.fault}',
            )
        if not outcome.passed:
            return FieldError(locate_predicate(name), f'Property "{name}" failed custom validation')

    return None


def _property_path(base: str, name: str) -> str:
    return f"{base}.{name}"


def validate_shape(
    field: str,
    value: Any,
    descriptor: Optional[Mapping[str, Any]],
    context: Optional[Mapping[str, Any]] = None,
) -> Optional[FieldError]:
    """
    Validate that ``value`` is an object matching ``descriptor``.

    Required, type and enum failures are reported at ``field``; predicate
    failures at ``field.<property>``. Falsy values are left to the
    ``required`` rule.

    Args:
        field: Name of the field under validation.
        value: The field value.
        descriptor: Shape descriptor.
        context: Validation context; unused.

    Returns:
        FieldError or None.
    """
    if is_falsy(value) or not descriptor:
        return None

    if not isinstance(value, Mapping):
        return FieldError(field, "Field must be an object")

    return check_properties(
        value,
        descriptor,
        locate_property=lambda name: field,
        locate_predicate=lambda name: f"{field}.{name}",
    )


def validate_shape_array(
    field: str,
    value: Any,
    descriptor: Optional[Mapping[str, Any]],
    context: Optional[Mapping[str, Any]] = None,
) -> Optional[FieldError]:
    """
    Validate that ``value`` is an array of objects matching ``descriptor``.

    The ``arrayPredicate`` validator (or its older spelling ``_array``),
    when present, runs first against the whole array. Element failures are
    reported at ``field[i]`` (not an object) or ``field[i].<property>``. An
    empty array is valid.

    Args:
        field: Name of the field under validation.
        value: The field value.
        descriptor: Shape descriptor, optionally with an array validator.
        context: Validation context; unused.

    Returns:
        FieldError or None.
    """
    if is_falsy(value) or not descriptor:
        return None

    if not isinstance(value, (list, tuple)):
        return FieldError(field, "Field must be an array")

    if not value:
        return None

    validators = descriptor.get("validators") or {}
    array_predicate = validators.get(
        ARRAY_VALIDATOR_KEY, validators.get(LEGACY_ARRAY_VALIDATOR_KEY)
    )
    if callable(array_predicate):
        outcome = run_predicate(array_predicate, value)
        if outcome.faulted:
            return FieldError(field, f"Array validation error: {outcome.fault}")
        if not outcome.passed:
            return FieldError(field, "Array failed custom validation")

    for index, item in enumerate(value):
        item_path = f"{field}[{index}]"

        if not isinstance(item, Mapping):
            return FieldError(item_path, "Array item must be an object")

        locate = partial(_property_path, item_path)
        error = check_properties(item, descriptor, locate, locate)
        if error:
            return error

    return None
