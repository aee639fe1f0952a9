"""
Data model for Record-Spec.

Plain dataclasses shared by the shape engine, the scalar rules and the
validation engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple


PRIMITIVE_TAGS = ("string", "number", "boolean", "object")

# Reserved keys under ``validators`` holding the whole-array predicate.
# ``_array`` is the older spelling and is still honoured.
ARRAY_VALIDATOR_KEY = "arrayPredicate"
LEGACY_ARRAY_VALIDATOR_KEY = "_array"
ARRAY_VALIDATOR_KEYS = (ARRAY_VALIDATOR_KEY, LEGACY_ARRAY_VALIDATOR_KEY)

# Key injected into the validation context carrying the field's rules.
FIELD_CONFIG_KEY = "__fieldConfig"

Predicate = Callable[[Any], Any]
Record = Mapping[str, Any]
FieldDescription = Mapping[str, Mapping[str, Any]]


class TypeKind(str, Enum):
    """How a shape entry constrains its property."""

    PRIMITIVE = "primitive"
    ENUM = "enum"
    ALTERNATIVES = "alternatives"


@dataclass(frozen=True)
class FieldError:
    """A single validation failure, addressed by location path."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"[{self.field}] {self.message}"

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary."""
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class TypeSpec:
    """
    Resolved form of a shape entry.

    ``values`` holds primitive tags for PRIMITIVE and ALTERNATIVES and
    allowed literals for ENUM.
    """

    kind: TypeKind
    values: Tuple[Any, ...] = field(default_factory=tuple)

    @property
    def tag(self) -> Optional[str]:
        if self.kind == TypeKind.PRIMITIVE:
            return self.values[0]
        return None


@dataclass(frozen=True)
class PredicateOutcome:
    """
    Result of running a caller-supplied predicate.

    ``passed`` is False both when the predicate returned a falsy value and
    when it raised; ``fault`` carries the rendered exception message in the
    latter case.
    """

    passed: bool
    fault: Optional[str] = None

    @property
    def faulted(self) -> bool:
        return self.fault is not None
