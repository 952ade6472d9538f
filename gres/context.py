# (C) 2025 Rodrigo Rodrigues da Silva <rodrigopitanga@posteo.net>
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations
import threading, time
from gres.errors import OperationCancelled


class Context:
    """
    Cancellation/deadline carrier handed to every store operation.
    Checked before each outbound call; the remaining time becomes that
    call's timeout. Children share the parent's cancel flag.
    """

    def __init__(self, deadline: float | None = None,
                 cancelled: threading.Event | None = None):
        self.deadline = deadline
        self._cancelled = cancelled or threading.Event()

    @classmethod
    def background(cls) -> "Context":
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float | None) -> "Context":
        if seconds is None:
            return cls()
        return cls(deadline=time.monotonic() + float(seconds))

    def child(self, seconds: float | None = None) -> "Context":
        deadline = self.deadline
        if seconds is not None:
            own = time.monotonic() + float(seconds)
            deadline = own if deadline is None else min(deadline, own)
        return Context(deadline=deadline, cancelled=self._cancelled)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def remaining(self) -> float | None:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        if self._cancelled.is_set():
            raise OperationCancelled("operation cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise OperationCancelled("deadline exceeded")
