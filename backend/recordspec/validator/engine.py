"""
Validation Engine.

Applies every rule declared in a field description to a record and
collects the resulting errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..loader import DescriptionError, load_description
from ..models import FIELD_CONFIG_KEY, FieldDescription, FieldError, Predicate, Record
from .registry import RuleRegistry, default_registry
from . import rules  # noqa: F401  (registers the built-in rules)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Result of validating a record against a field description.

    ``errors`` holds rule failures in field order, then rule order.
    ``load_errors`` holds problems reading the description itself.
    """

    valid: bool
    errors: List[FieldError] = field(default_factory=list)
    load_errors: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors) + len(self.load_errors)

    def errors_for(self, field_name: str) -> List[FieldError]:
        """Errors located at a field or anywhere below it."""
        return [
            e for e in self.errors
            if e.field == field_name
            or e.field.startswith(f"{field_name}.")
            or e.field.startswith(f"{field_name}[")
        ]

    def summary(self) -> str:
        """Generate a summary of validation results."""
        lines = []
        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Validation {status}")
        lines.append(f"  Errors: {self.error_count}")
        for message in self.load_errors:
            lines.append(f"  - {message}")
        for error in self.errors:
            lines.append(f"  - {error}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "error_count": self.error_count,
            "errors": [e.to_dict() for e in self.errors],
            "load_errors": list(self.load_errors),
        }


def validate(
    record: Record,
    description: FieldDescription,
    registry: Optional[RuleRegistry] = None,
) -> List[FieldError]:
    """
    Validate a record against a field description.

    Args:
        record: Mapping of field name to value.
        description: Mapping of field name to rules, e.g.
            ``{"email": {"required": True, "regexp": r"@"}}``.
        registry: Rule registry to dispatch through; defaults to the
            built-in rules.

    Returns:
        Flat list of FieldError, at most one per field and rule.
    """
    registry = registry or default_registry
    errors: List[FieldError] = []

    for field_name, field_rules in description.items():
        context = dict(record)
        context[FIELD_CONFIG_KEY] = field_rules
        value = record.get(field_name)

        for rule_name, options in field_rules.items():
            handler = registry.get(rule_name)
            if handler is None:
                logger.debug("No handler for rule %r on field %r", rule_name, field_name)
                continue

            error = handler(field_name, value, options, context)
            if error:
                errors.append(error)

    return errors


class ValidationEngine:
    """
    Validates records against field descriptions.

    The engine keeps no per-call state and can be shared between callers.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None):
        """
        Initialize the validation engine.

        Args:
            registry: Rule registry to use instead of the built-in rules.
        """
        self.registry = registry or default_registry

    def validate(
        self,
        record: Record,
        description: FieldDescription,
    ) -> ValidationResult:
        """
        Run every declared rule against a record.

        Args:
            record: The data record.
            description: The field description.

        Returns:
            ValidationResult with all errors.
        """
        errors = validate(record, description, self.registry)
        return ValidationResult(valid=not errors, errors=errors)

    def validate_file(
        self,
        record: Record,
        path: Union[str, Path],
        predicates: Optional[Mapping[str, Predicate]] = None,
    ) -> ValidationResult:
        """
        Validate a record against a description stored in a YAML file.

        Args:
            record: The data record.
            path: Path to the description YAML file.
            predicates: Named predicates referenced by shape validators.

        Returns:
            ValidationResult; unreadable descriptions are reported in
            ``load_errors``.
        """
        path = Path(path)
        result = ValidationResult(valid=True)

        if not path.exists():
            result.valid = False
            result.load_errors.append(f"File not found: {path}")
            return result

        try:
            description = load_description(path, predicates)
        except DescriptionError as e:
            result.valid = False
            result.load_errors.append(str(e))
            return result

        return self.validate(record, description)

    def quick_validate(self, record: Record, description: FieldDescription) -> bool:
        """
        Quick pass/fail check.

        Args:
            record: The data record.
            description: The field description.

        Returns:
            True if no rule fails.
        """
        return not validate(record, description, self.registry)
