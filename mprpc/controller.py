"""State of a single RPC call as seen by the caller."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


@dataclass
class RpcController:
    """Records whether an RPC call failed and why."""

    failed: bool = False
    error_text: str = ""
    cancel_requested: bool = field(default=False, compare=False, repr=False)
    cancel_callbacks: list[Callable[[], None]] = field(
        default_factory=list, compare=False, repr=False
    )

    def reset(self) -> None:
        """Clear the failure and cancellation state so the controller can be reused."""
        self.failed = False
        self.error_text = ""
        self.cancel_requested = False
        self.cancel_callbacks.clear()

    def set_failed(self, reason: str) -> None:
        """Mark the call as failed with *reason*."""
        self.failed = True
        self.error_text = reason

    def start_cancel(self) -> None:
        """Record a cancellation request; calls run to completion regardless."""
        self.cancel_requested = True

    def is_canceled(self) -> bool:
        """Return whether the call was cancelled, which never happens."""
        return False

    def notify_on_cancel(self, callback: Callable[[], None]) -> None:
        """Keep *callback* for cancellation; as calls are never cancelled it is never run."""
        self.cancel_callbacks.append(callback)