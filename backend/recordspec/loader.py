"""
Field Description Loader.

Reads field descriptions from YAML:

    email:
      required: true
      regexp: "^[^@]+@[^@]+$"
    barcode:
      shapeOf:
        shape:
          code: string
          type: [EAN8, EAN13, UPC]
        required: [code]
        validators:
          code: is_valid_barcode

Predicates cannot be written in YAML, so shape ``validators`` name entries
of a predicate table supplied by the caller.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .models import Predicate

logger = logging.getLogger(__name__)

SHAPE_RULES = ("shapeOf", "arrayOfShapes")


class DescriptionError(ValueError):
    """Raised when a field description cannot be loaded."""


def _resolve_validators(
    field_name: str,
    rule_name: str,
    validators: Mapping[str, Any],
    predicates: Mapping[str, Predicate],
) -> Dict[str, Predicate]:
    resolved = {}
    for prop, ref in validators.items():
        if not isinstance(ref, str) or ref not in predicates:
            raise DescriptionError(
                f"{field_name}.{rule_name}: unknown predicate '{ref}' for '{prop}'"
            )
        resolved[prop] = predicates[ref]
    return resolved


def _build_rules(
    field_name: str,
    field_rules: Any,
    predicates: Mapping[str, Predicate],
) -> Dict[str, Any]:
    if not isinstance(field_rules, Mapping):
        raise DescriptionError(f"Rules for field '{field_name}' must be a mapping")

    rules = dict(field_rules)

    pattern = rules.get("regexp")
    if isinstance(pattern, str):
        try:
            rules["regexp"] = re.compile(pattern)
        except re.error as e:
            raise DescriptionError(f"{field_name}.regexp: invalid pattern: {e}") from e

    for rule_name in SHAPE_RULES:
        descriptor = rules.get(rule_name)
        if isinstance(descriptor, Mapping) and descriptor.get("validators"):
            descriptor = dict(descriptor)
            descriptor["validators"] = _resolve_validators(
                field_name, rule_name, descriptor["validators"], predicates
            )
            rules[rule_name] = descriptor

    return rules


def parse_description(
    content: str,
    predicates: Optional[Mapping[str, Predicate]] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Parse a field description from YAML content.

    Args:
        content: YAML text.
        predicates: Named predicates referenced by shape validators.

    Returns:
        Field description ready for validation.
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DescriptionError(f"YAML parse error: {e}") from e

    if data is None:
        raise DescriptionError("Description is empty")
    if not isinstance(data, Mapping):
        raise DescriptionError("Description must be a mapping of field names to rules")

    predicates = predicates or {}
    return {
        str(name): _build_rules(str(name), field_rules, predicates)
        for name, field_rules in data.items()
    }


def load_description(
    path: Path,
    predicates: Optional[Mapping[str, Predicate]] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Load a field description from a YAML file.

    Args:
        path: Path to the description file.
        predicates: Named predicates referenced by shape validators.

    Returns:
        Field description ready for validation.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise DescriptionError(f"Cannot read {path}: {e}") from e

    description = parse_description(content, predicates)
    logger.debug("Loaded %d field(s) from %s", len(description), path)
    return description
