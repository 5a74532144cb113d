"""Alignment arithmetic and a per-thread stack of execution contexts."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

CONTEXT_STACK_MAX = 512

_U64_MASK = (1 << 64) - 1


def next_power_of_two(x: int) -> int:
    """Return the smallest power of two that is >= x (1 for 0)."""
    if x < 0:
        raise ValueError(f"next_power_of_two expects a non-negative value, got {x}")
    if x == 0:
        return 1
    return 1 << (x - 1).bit_length()


def _check_alignment(alignment: int) -> None:
    if alignment <= 0 or alignment & (alignment - 1):
        raise ValueError(f"alignment must be a positive power of two, got {alignment}")


def align_next(x: int, alignment: int) -> int:
    """Round x up to the next multiple of alignment."""
    _check_alignment(alignment)
    return ((x + alignment - 1) & ~(alignment - 1)) & _U64_MASK


def align_previous(x: int, alignment: int) -> int:
    """Round x down to the previous multiple of alignment."""
    _check_alignment(alignment)
    return (x & ~(alignment - 1)) & _U64_MASK


@dataclass
class Context:
    """State carried along with the code running on a thread."""

    logger: Optional[Callable[..., Any]] = None
    thread_id: int = 0
    extra: Any = None


class ContextStack:
    """A bounded stack of contexts, kept separately for every thread."""

    def __init__(self, max_depth: int = CONTEXT_STACK_MAX) -> None:
        self.max_depth = max_depth
        self._local = threading.local()

    def _state(self) -> threading.local:
        local = self._local
        if not hasattr(local, "stack"):
            local.stack = []
            local.current = Context(thread_id=threading.get_ident())
        return local

    def push(self, context: Context) -> None:
        """Make context current, remembering the one it replaces."""
        state = self._state()
        if len(state.stack) >= self.max_depth:
            raise OverflowError("Context stack overflow")
        state.stack.append(state.current)
        state.current = context

    def pop(self) -> Context:
        """Restore the previous context and return the one that was current."""
        state = self._state()
        if not state.stack:
            raise IndexError("No contexts to pop!")
        popped = state.current
        state.current = state.stack.pop()
        return popped

    def current(self) -> Context:
        """Return the context current on the calling thread."""
        return self._state().current

    @contextmanager
    def pushed(self, context: Context) -> Iterator[Context]:
        """Make context current for the duration of a with-block."""
        self.push(context)
        try:
            yield context
        finally:
            self.pop()

    def __len__(self) -> int:
        return len(self._state().stack)