"""
Rule Registry.

Maps rule keys used in field descriptions (``required``, ``minLength``,
``shapeOf``, ...) to the handlers that implement them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from ..models import FieldError

logger = logging.getLogger(__name__)

RuleHandler = Callable[[str, Any, Any, Mapping[str, Any]], Optional[FieldError]]


class RuleRegistry:
    """
    Explicit table of rule handlers.

    Every handler takes ``(field, value, options, context)`` and returns a
    FieldError or None.
    """

    def __init__(self, handlers: Optional[Dict[str, RuleHandler]] = None):
        """
        Initialize the registry.

        Args:
            handlers: Initial rule key to handler mapping.
        """
        self._handlers: Dict[str, RuleHandler] = {}
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def register(self, name: str, handler: RuleHandler, replace: bool = False) -> None:
        """
        Register a handler for a rule key.

        Args:
            name: Rule key as used in field descriptions.
            handler: Callable implementing the rule.
            replace: Allow overriding an existing handler.
        """
        if not callable(handler):
            raise TypeError(f"Handler for rule '{name}' is not callable")
        if name in self._handlers:
            if not replace:
                raise ValueError(f"Rule already registered: {name}")
            logger.debug("Replacing handler for rule %r", name)
        self._handlers[name] = handler

    def rule(self, name: str) -> Callable[[RuleHandler], RuleHandler]:
        """Decorator form of register()."""

        def decorator(handler: RuleHandler) -> RuleHandler:
            self.register(name, handler)
            return handler

        return decorator

    def get(self, name: str) -> Optional[RuleHandler]:
        return self._handlers.get(name)

    def names(self) -> List[str]:
        """List registered rule keys in registration order."""
        return list(self._handlers)

    def copy(self) -> "RuleRegistry":
        """Return an independent registry with the same handlers."""
        return RuleRegistry(dict(self._handlers))

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


default_registry = RuleRegistry()
