"""Interception registry - registration API and trailing task tracking.

The InterceptionRegistry is the entry point of the library. It provides:
- Idempotent installation of a Pipeline in place of an operation
- Appending before/after/trailing callbacks
- Access to the original, unintercepted operation
- Tracking of trailing chains still running in the background

IMPORTANT: This is a STABLE API. Changes to the registration interface
           would be breaking changes for code that extends operations.
"""

import asyncio
import inspect
from collections.abc import Coroutine
from typing import Any, Callable, Optional

from hookline.core.config import Settings, get_settings
from hookline.core.interception.interception_record import (
    ErrorHandler,
    InterceptionRecord,
)
from hookline.core.interception.pipeline import Pipeline
from hookline.core.logging import get_logger

logger = get_logger(__name__)


class InterceptionRegistry:
    """Registration API for intercepted operations.

    Example:
        registry = InterceptionRegistry(error_handler=report_error)

        # Every call to service.save now runs validate, save, enrich
        registry.add_before(service, "save", validate)
        registry.add_after(service, "save", enrich)
        registry.add_trailing(service, "save", audit)

        saved = await service.save({"title": "Hello"})

        # Bypass every callback
        raw_save = registry.get_original(service, "save")

        # Wait for audit to finish, e.g. at shutdown
        await registry.drain()
    """

    def __init__(
        self,
        error_handler: Optional[ErrorHandler] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """Initialize the registry.

        Args:
            error_handler: Fallback sink for chain failures of operations
                           registered without their own handler. Receives
                           the raw exception; may be sync or async.
            settings: Settings to use. Defaults to get_settings().
        """
        self.error_handler = error_handler
        self.settings = settings or get_settings()
        self._pending: set[asyncio.Task] = set()

    def register_interception(
        self,
        owner: Any,
        name: str,
        error_handler: Optional[ErrorHandler] = None,
    ) -> InterceptionRecord:
        """Replace ``owner.name`` with a Pipeline. Idempotent.

        Calling this again for the same owner and name returns the
        existing record without wrapping the operation a second time.
        Likewise, an instance whose class already intercepted the method
        gets the class's record; callbacks added through it apply to every
        instance.

        Args:
            owner: Object owning the operation (instance, class or module).
            name: Attribute name of the operation.
            error_handler: Sink for failures of this operation's chains.
                           Adopted on a later call if none was set before.

        Returns:
            The InterceptionRecord of the operation.

        Raises:
            AttributeError: If ``owner`` has no attribute ``name``.
            TypeError: If the attribute is not callable.
        """
        existing = self.get_record(owner, name)
        if existing is not None:
            if existing.error_handler is None and error_handler is not None:
                existing.error_handler = error_handler
            return existing

        original = getattr(owner, name)
        if not callable(original):
            raise TypeError(
                f"Cannot intercept {name!r}: attribute of {type(owner).__name__} "
                "is not callable"
            )

        record = InterceptionRecord(
            name=name,
            original=original,
            owner=owner,
            error_handler=error_handler,
            bind_instance=_needs_instance_binding(owner, name),
        )
        setattr(owner, name, Pipeline(record, self))
        record.mark_installed()

        logger.debug(
            "Operation intercepted",
            operation=name,
            owner_type=type(owner).__name__,
            bind_instance=record.bind_instance,
        )

        return record

    def add_before(self, owner: Any, name: str, callback: Callable) -> Callable:
        """Append a callback to run before ``owner.name``.

        Installs the interception first if needed. Calls already in
        progress are not affected.

        Returns:
            The callback, unchanged.
        """
        record = self.register_interception(owner, name)
        record.before.append(callback)
        self._log_added("before", record, callback)
        return callback

    def add_after(self, owner: Any, name: str, callback: Callable) -> Callable:
        """Append a callback to run after ``owner.name``.

        Returns:
            The callback, unchanged.
        """
        record = self.register_interception(owner, name)
        record.after.append(callback)
        self._log_added("after", record, callback)
        return callback

    def add_trailing(self, owner: Any, name: str, callback: Callable) -> Callable:
        """Append a callback to run once ``owner.name`` has succeeded.

        Trailing callbacks receive the operation's final result. The caller
        does not wait for them and their failures never reach the caller.

        Returns:
            The callback, unchanged.
        """
        record = self.register_interception(owner, name)
        record.trailing.append(callback)
        self._log_added("trailing", record, callback)
        return callback

    def get_original(self, owner: Any, name: str) -> Callable:
        """Get the operation as it was before interception.

        Returns ``owner.name`` unchanged when it is not intercepted.
        """
        record = self.get_record(owner, name)
        if record is None:
            return getattr(owner, name)
        if record.owner is not owner:
            # Intercepted on the class, bind the original to this instance
            return record.original.__get__(owner, type(owner))
        return record.original

    def get_record(self, owner: Any, name: str) -> Optional[InterceptionRecord]:
        """Get the InterceptionRecord of ``owner.name``, or None if not intercepted.

        For an instance whose class intercepted the method, this is the
        class's record: it holds the callbacks the instance runs.
        """
        current = inspect.getattr_static(owner, name, None)
        if not isinstance(current, Pipeline):
            return None

        record = current.record
        if record.owner is owner:
            return record
        if (
            record.bind_instance
            and isinstance(record.owner, type)
            and not isinstance(owner, type)
            and isinstance(owner, record.owner)
        ):
            return record
        return None

    def is_intercepted(self, owner: Any, name: str) -> bool:
        """Check whether ``owner.name`` is intercepted."""
        return self.get_record(owner, name) is not None

    def track(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        """Schedule a trailing chain and keep a reference until it finishes."""
        task = asyncio.get_running_loop().create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending_trailing(self) -> int:
        """Number of trailing chains still running."""
        return len(self._pending)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """Wait until every trailing chain scheduled so far has finished.

        Args:
            timeout: Seconds to wait. Defaults to
                     ``settings.drain_timeout_seconds`` (None waits forever).

        Raises:
            TimeoutError: If the chains did not finish in time. They keep
                          running.
        """
        if timeout is None:
            timeout = self.settings.drain_timeout_seconds

        pending = list(self._pending)
        if not pending:
            return

        logger.debug("Draining trailing chains", count=len(pending))
        done, not_done = await asyncio.wait(pending, timeout=timeout)
        if not_done:
            raise TimeoutError(
                f"{len(not_done)} trailing chain(s) still running after {timeout}s"
            )

    def _log_added(self, phase: str, record: InterceptionRecord, callback: Callable) -> None:
        logger.debug(
            "Callback added",
            operation=record.name,
            phase=phase,
            callback=getattr(callback, "__qualname__", repr(callback)),
        )


def _needs_instance_binding(owner: Any, name: str) -> bool:
    """Whether ``owner.name`` is an instance method defined on a class."""
    if not isinstance(owner, type):
        return False
    static = inspect.getattr_static(owner, name)
    if isinstance(static, Pipeline):
        return static.record.bind_instance
    return inspect.isfunction(static)


default_registry = InterceptionRegistry()


def register_interception(
    owner: Any, name: str, error_handler: Optional[ErrorHandler] = None
) -> InterceptionRecord:
    """Intercept ``owner.name`` using the default registry."""
    return default_registry.register_interception(owner, name, error_handler)


def add_before(owner: Any, name: str, callback: Callable) -> Callable:
    """Append a before callback using the default registry."""
    return default_registry.add_before(owner, name, callback)


def add_after(owner: Any, name: str, callback: Callable) -> Callable:
    """Append an after callback using the default registry."""
    return default_registry.add_after(owner, name, callback)


def add_trailing(owner: Any, name: str, callback: Callable) -> Callable:
    """Append a trailing callback using the default registry."""
    return default_registry.add_trailing(owner, name, callback)


def get_original(owner: Any, name: str) -> Callable:
    """Get the unintercepted operation using the default registry."""
    return default_registry.get_original(owner, name)
