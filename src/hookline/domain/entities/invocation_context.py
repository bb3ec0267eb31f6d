"""Invocation context for intercepted operations.

Contains the core data structures describing one run of a pipeline:
- ChainPhase: which part of the pipeline a step belongs to
- InvocationState: the per-invocation state machine
- InvocationContext: context visible to every callback of a chain
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional


class ChainPhase:
    """Pipeline phases.

    before/original/after form the primary chain whose result is returned
    to the caller. trailing runs afterwards and is never awaited by the
    caller.
    """

    BEFORE = "before"
    ORIGINAL = "original"
    AFTER = "after"
    TRAILING = "trailing"


class InvocationState:
    """States an invocation moves through.

    Primary chain:
        START -> RUNNING_BEFORE -> RUNNING_ORIGINAL -> RUNNING_AFTER -> SETTLED

    Trailing chain (separate context, never feeds back to the caller):
        RUNNING_TRAILING -> DONE
    """

    START = "start"
    RUNNING_BEFORE = "running_before"
    RUNNING_ORIGINAL = "running_original"
    RUNNING_AFTER = "running_after"
    SETTLED = "settled"
    RUNNING_TRAILING = "running_trailing"
    DONE = "done"


_PHASE_STATES = {
    ChainPhase.BEFORE: InvocationState.RUNNING_BEFORE,
    ChainPhase.ORIGINAL: InvocationState.RUNNING_ORIGINAL,
    ChainPhase.AFTER: InvocationState.RUNNING_AFTER,
    ChainPhase.TRAILING: InvocationState.RUNNING_TRAILING,
}


@dataclass
class InvocationContext:
    """Context for a single run of an intercepted operation.

    Callbacks receive only the previous step's result as their argument.
    Everything else about the call (which object owns the operation, which
    phase is running) is available through this context, see
    ``hookline.core.context.get_current_invocation``.

    Attributes:
        operation: Name of the intercepted operation.
        owner: The object whose operation was intercepted, or None for a
            standalone pipeline.
        phase: Phase of the step currently running (ChainPhase value).
        state: Current InvocationState value.
        invocation_id: Identifier used to correlate log entries.
        succeeded: None while running, then whether the chain succeeded.
        error: The exception that stopped the chain, if any.

    Example:
        from hookline.core.context import get_current_invocation

        def audit(result):
            ctx = get_current_invocation()
            logger.info("Operation finished", operation=ctx.operation)
            return result
    """

    operation: str
    owner: Any = None
    phase: Optional[str] = None
    state: str = InvocationState.START
    invocation_id: str = ""
    succeeded: Optional[bool] = None
    error: Optional[BaseException] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Generate an invocation ID when none was given."""
        if not self.invocation_id:
            self.invocation_id = f"inv_{uuid.uuid4().hex[:12]}"

    def enter_phase(self, phase: str) -> None:
        """Move the state machine to the running state of ``phase``."""
        self.phase = phase
        self.state = _PHASE_STATES[phase]

    def settle(self, succeeded: bool, error: Optional[BaseException] = None) -> None:
        """Mark the primary chain as settled."""
        self.state = InvocationState.SETTLED
        self.succeeded = succeeded
        self.error = error

    def finish(self, succeeded: bool, error: Optional[BaseException] = None) -> None:
        """Mark the trailing chain as done."""
        self.state = InvocationState.DONE
        self.succeeded = succeeded
        self.error = error

    def for_trailing(self) -> "InvocationContext":
        """Create the separate context used by the trailing chain.

        The trailing context shares the invocation ID so log entries of
        both chains can be correlated.
        """
        return InvocationContext(
            operation=self.operation,
            owner=self.owner,
            invocation_id=self.invocation_id,
        )
