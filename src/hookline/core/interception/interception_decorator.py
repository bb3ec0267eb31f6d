"""Decorator API for callback registration.

Enables registering callbacks where they are defined:

    hooks = InterceptionDecorator(registry)

    @hooks.before(service, "save")
    def validate(record):
        ...
        return record
"""

from typing import Any, Callable, Optional, TypeVar

from hookline.core.interception.interception_record import ErrorHandler
from hookline.core.interception.interception_registry import InterceptionRegistry
from hookline.domain.entities.invocation_context import ChainPhase

F = TypeVar("F", bound=Callable[..., Any])


class InterceptionDecorator:
    """Provides decorator syntax on top of an InterceptionRegistry.

    Decorated functions are registered and returned unchanged, so they
    stay directly callable.

    Example:
        hooks = InterceptionDecorator(registry)

        @hooks.after(repository, "load")
        async def attach_permissions(record):
            record["permissions"] = await fetch_permissions(record["id"])
            return record

        @hooks.trailing(repository, "load")
        def count_load(record):
            metrics.increment("loads")
    """

    def __init__(self, registry: InterceptionRegistry) -> None:
        """Initialize with an InterceptionRegistry.

        Args:
            registry: The InterceptionRegistry to delegate to.
        """
        self._registry = registry

    @property
    def registry(self) -> InterceptionRegistry:
        """Get the underlying registry."""
        return self._registry

    def intercept(
        self, owner: Any, name: str, error_handler: Optional[ErrorHandler] = None
    ) -> None:
        """Intercept ``owner.name`` without adding a callback."""
        self._registry.register_interception(owner, name, error_handler)

    def before(self, owner: Any, name: str) -> Callable[[F], F]:
        """Register the decorated function to run before ``owner.name``."""
        return self._create_decorator(ChainPhase.BEFORE, owner, name)

    def after(self, owner: Any, name: str) -> Callable[[F], F]:
        """Register the decorated function to run after ``owner.name``."""
        return self._create_decorator(ChainPhase.AFTER, owner, name)

    def trailing(self, owner: Any, name: str) -> Callable[[F], F]:
        """Register the decorated function to run once ``owner.name`` succeeded."""
        return self._create_decorator(ChainPhase.TRAILING, owner, name)

    def _create_decorator(self, phase: str, owner: Any, name: str) -> Callable[[F], F]:
        register = {
            ChainPhase.BEFORE: self._registry.add_before,
            ChainPhase.AFTER: self._registry.add_after,
            ChainPhase.TRAILING: self._registry.add_trailing,
        }[phase]

        def decorator(func: F) -> F:
            register(owner, name, func)
            return func

        return decorator
