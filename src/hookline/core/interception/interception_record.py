"""Interception record - per-operation registration store."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

ErrorHandler = Callable[..., Any]


@dataclass
class InterceptionRecord:
    """Registration state of one intercepted operation.

    There is exactly one record per (owner, operation name). It is stored
    on the Pipeline installed in place of the operation, so it lives
    exactly as long as the owner does.

    Attributes:
        name: Name of the intercepted operation.
        original: The operation as it was before interception. Captured
                  once and never reassigned.
        owner: The object whose attribute was replaced. None for a
               standalone pipeline.
        before: Callbacks run before the original, in insertion order.
        after: Callbacks run after the original, in insertion order.
        trailing: Callbacks run once the primary chain succeeded, without
                  the caller waiting for them.
        installed: Whether the replacement is in place.
        error_handler: Sink for failures of this operation's chains.
        installed_at: When the operation was intercepted.
        bind_instance: Whether the original is a plain function that must be
                       bound to the instance when the pipeline is reached
                       through a class attribute.
    """

    name: str
    original: Callable
    owner: Any = None
    before: list[Callable] = field(default_factory=list)
    after: list[Callable] = field(default_factory=list)
    trailing: list[Callable] = field(default_factory=list)
    installed: bool = False
    error_handler: Optional[ErrorHandler] = None
    installed_at: Optional[datetime] = None
    bind_instance: bool = False

    def mark_installed(self) -> None:
        """Flag the record as installed."""
        self.installed = True
        self.installed_at = datetime.now(timezone.utc)

    def primary_chain(self) -> tuple[list[Callable], int, int]:
        """Snapshot the primary chain.

        Returns:
            Tuple of (steps, original index, after start index) where steps
            is before + [original] + after.
        """
        before = list(self.before)
        after = list(self.after)
        steps = before + [self.original] + after
        return steps, len(before), len(before) + 1

    def trailing_chain(self) -> list[Callable]:
        """Snapshot the trailing chain."""
        return list(self.trailing)
