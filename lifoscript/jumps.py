"""
Forward jump resolution.

LIFO Script only jumps forward, and the source is scanned exactly once, so
a taken jump cannot move a program counter. Instead the resolver switches
into skip mode: every following instruction is still recognized but has no
effect, until the declaration of the pending label is reached.

    NORMAL ──JUMP name / JUMPI name (true)──> PENDING(name)
    PENDING(name) ──name:──> NORMAL
    PENDING(name) ──other:──> PENDING(name)
"""

from __future__ import annotations
import enum
import logging
from typing import Optional, Set

from . import stack as ops
from .values import Stack, ValueType

__all__ = ['ResolverState', 'JumpResolver', 'LabelError', 'JumpiError']

log = logging.getLogger(__name__)


class ResolverState(enum.Enum):
    NORMAL = "NORMAL"
    PENDING = "PENDING"


class LabelError(Exception):
    """A label declaration or the end of input does not fit the resolver state."""


class JumpiError(ops.StackError):
    """JUMPI found no boolean condition on top of the stack."""


class JumpResolver:
    """Tracks the pending label and whether instructions are being skipped."""

    def __init__(self):
        self.pending: Optional[str] = None
        # Every label named by a JUMP/JUMPI so far, taken or not
        self.referenced: Set[str] = set()

    @property
    def state(self) -> ResolverState:
        return ResolverState.PENDING if self.pending is not None else ResolverState.NORMAL

    @property
    def skipping(self) -> bool:
        return self.pending is not None

    def jump(self, label: str):
        self.referenced.add(label)
        if self.skipping:
            return
        log.debug("jump to %s: skipping until %s:", label, label)
        self.pending = label

    def condition(self, stack: Stack) -> bool:
        """Return the boolean on top of the stack, without popping it."""
        if len(stack) < 1:
            raise JumpiError("Stack must be at least 1 element deep")
        top = stack[0].value
        if top.kind is not ValueType.BOOL:
            raise JumpiError("Top element must be a boolean value")
        return top.data

    def jumpi(self, stack: Stack, label: str) -> Stack:
        """Pop the boolean condition and jump when it is true."""
        self.referenced.add(label)
        if self.skipping:
            return stack
        if self.condition(stack):
            self.jump(label)
        else:
            log.debug("jumpi to %s not taken", label)
        return stack[1:]

    def declare(self, name: str):
        """Handle a ``name:`` declaration."""
        if self.pending == name:
            log.debug("reached %s:, resuming execution", name)
            self.pending = None
            return
        if self.skipping or name in self.referenced:
            return
        raise LabelError(f"{name}:")

    def finish(self):
        """Called at end of input; a label still pending was never reached."""
        if self.skipping:
            raise LabelError(f"Label '{self.pending}' is never declared")
