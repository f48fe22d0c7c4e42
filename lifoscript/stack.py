"""
Stack engine for LIFO Script.

Pure functions over an immutable stack (a tuple of ``StackEl``, index 0 is
the top). Each operation checks its preconditions first and returns a new
stack, so a failed operation never leaves a half-applied stack behind.

Failures raise a ``StackError`` subclass carrying a human-readable message;
the interpreter maps them onto the per-instruction ``ErrorKind``.
"""

from __future__ import annotations
from typing import Tuple

from .lexer import TokenType
from .values import LifoVector, Stack, StackEl, TypeMismatch, Value, ValueType

__all__ = [
    'StackError', 'ArityError', 'OperandError', 'UnderflowError', 'BoundsError',
    'push', 'add', 'sub', 'mul', 'dup', 'eq', 'neq', 'pop', 'swap', 'concat',
    'empty_vector', 'insert_vector', 'size', 'index',
]


class StackError(Exception):
    """Base class for stack engine failures."""


class ArityError(StackError):
    """Stack is not deep enough for the operation."""


class OperandError(StackError):
    """Operands have the wrong type for the operation."""


class UnderflowError(StackError):
    """Subtraction would produce a negative integer."""


class BoundsError(StackError):
    """Index outside the string or vector."""


# ──────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────

def _need(stack: Stack, depth: int):
    if len(stack) < depth:
        unit = "element" if depth == 1 else "elements"
        raise ArityError(f"Stack must be at least {depth} {unit} deep")


def _both_ints(stack: Stack) -> bool:
    return stack[0].value.kind is ValueType.INT and stack[1].value.kind is ValueType.INT


def _replace(stack: Stack, count: int, el: StackEl) -> Stack:
    """Drop ``count`` elements from the top and push ``el``."""
    return (el,) + stack[count:]


# ──────────────────────────────────────────────
# Arithmetic
# ──────────────────────────────────────────────

def push(stack: Stack, el: StackEl) -> Stack:
    return (el,) + stack


def add(stack: Stack) -> Stack:
    _need(stack, 2)
    if not _both_ints(stack):
        raise OperandError("Only integers can be added")
    total = stack[1].value.data + stack[0].value.data
    return _replace(stack, 2, StackEl(TokenType.ADD, Value.of_int(total)))


def sub(stack: Stack) -> Stack:
    """second - top. Integers are non-negative, so the result must be too."""
    _need(stack, 2)
    if not _both_ints(stack):
        raise OperandError("Only integers can be subtracted")
    minuend = stack[1].value.data
    subtrahend = stack[0].value.data
    if minuend < subtrahend:
        raise UnderflowError(f"Subtraction underflow: {minuend} - {subtrahend} is negative")
    return _replace(stack, 2, StackEl(TokenType.SUB, Value.of_int(minuend - subtrahend)))


def mul(stack: Stack) -> Stack:
    _need(stack, 2)
    if not _both_ints(stack):
        raise OperandError("Only integers can be multiplied")
    product = stack[1].value.data * stack[0].value.data
    return _replace(stack, 2, StackEl(TokenType.MUL, Value.of_int(product)))


# ──────────────────────────────────────────────
# Comparison
# ──────────────────────────────────────────────

def _same_type(stack: Stack):
    if stack[0].value.kind is not stack[1].value.kind:
        raise OperandError("Elements must be of the same type")


def eq(stack: Stack) -> Stack:
    _need(stack, 2)
    _same_type(stack)
    result = stack[0].value == stack[1].value
    return _replace(stack, 2, StackEl(TokenType.EQ, Value.of_bool(result)))


def neq(stack: Stack) -> Stack:
    _need(stack, 2)
    _same_type(stack)
    result = stack[0].value != stack[1].value
    return _replace(stack, 2, StackEl(TokenType.NEQ, Value.of_bool(result)))


# ──────────────────────────────────────────────
# Shuffling
# ──────────────────────────────────────────────

def dup(stack: Stack) -> Stack:
    _need(stack, 1)
    return (stack[0],) + stack


def pop(stack: Stack) -> Stack:
    _need(stack, 1)
    return stack[1:]


def swap(stack: Stack) -> Stack:
    _need(stack, 2)
    return (stack[1], stack[0]) + stack[2:]


# ──────────────────────────────────────────────
# Strings and vectors
# ──────────────────────────────────────────────

def concat(stack: Stack) -> Stack:
    """top ++ second."""
    _need(stack, 2)
    first, second = stack[0].value, stack[1].value
    if first.kind is not ValueType.STRING or second.kind is not ValueType.STRING:
        raise OperandError("Only strings can be concatenated")
    return _replace(stack, 2, StackEl(TokenType.CONCAT, Value.of_str(first.data + second.data)))


def empty_vector(stack: Stack) -> Stack:
    return push(stack, StackEl(TokenType.EMPTY_VECTOR, Value.of_vector()))


def insert_vector(stack: Stack) -> Stack:
    _need(stack, 2)
    item, target = stack[0].value, stack[1].value
    if target.kind is not ValueType.VECTOR:
        raise OperandError("Invalid stack to insert an element in a vector")
    try:
        vector = target.data.insert(item)
    except TypeMismatch as e:
        raise OperandError(str(e)) from e
    return _replace(stack, 2, StackEl(TokenType.INSERT, Value.of_vector(vector)))


def _sequence(stack: Stack, action: str) -> Tuple[Value, int]:
    top = stack[0].value
    if top.kind not in (ValueType.STRING, ValueType.VECTOR):
        raise OperandError(f"Cannot {action} element of type {top.type_name}")
    return top, len(top.data)


def size(stack: Stack) -> Stack:
    """Replace the top string or vector by its length."""
    _need(stack, 1)
    _, length = _sequence(stack, "give the size of")
    return _replace(stack, 1, StackEl(TokenType.SIZE, Value.of_int(length)))


def index(stack: Stack, i: int) -> Stack:
    """Replace the top string or vector by its 0-based element ``i``."""
    _need(stack, 1)
    top, length = _sequence(stack, "index")
    if top.kind is ValueType.STRING:
        if i >= length:
            raise BoundsError(f"Out of bound index {i} for string of length {length}")
        picked = Value.of_str(top.data[i])
    else:
        vector: LifoVector = top.data
        if length == 0:
            raise BoundsError(f"Out of bound index {i} for empty vector")
        if i >= length:
            raise BoundsError(f"Out of bound index {i} for vector of length {length}")
        picked = vector.at(i)
    return _replace(stack, 1, StackEl(TokenType.INDEX, picked))
