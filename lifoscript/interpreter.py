"""
Interpreter for LIFO Script.

Pulls tokens from the lexer one at a time and executes each instruction as
soon as it is recognized, against a single ``EvaluationState``.

Execution model:
  1. Fetch the next token from the lexer
  2. Dispatch on its type to a handler
  3. Composite instructions (PUSH*, INDEX, JUMP, JUMPI) fetch their operand
     token in the same step
  4. In skip mode the handler validates operands but leaves the stack alone
  5. Otherwise the stack engine returns a new stack, which replaces the old
     one in a single assignment

Termination:
  - end of input: the final stack is returned (a label still pending is an
    UnresolvedLabel error unless ``strict_labels`` is off)
  - first error: a ScriptError is raised and the run is abandoned
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional, Tuple

from . import stack as ops
from .errors import ErrorKind, ScriptError
from .jumps import JumpiError, JumpResolver, LabelError
from .lexer import INSTRUCTIONS, LITERALS, Lexer, Token, TokenType
from .values import Stack, StackEl, Value

__all__ = ['Interpreter', 'EvaluationState', 'RunOptions', 'RunResult', 'format_stack',
           'run_source', 'tokenize']

log = logging.getLogger(__name__)


# ──────────────────────────────────────────────
# Instruction tables
# ──────────────────────────────────────────────

# Instructions that only transform the stack: engine function + error kind
STACK_OPS: Dict[TokenType, Tuple[Callable[[Stack], Stack], ErrorKind]] = {
    TokenType.ADD: (ops.add, ErrorKind.ADD_ERROR),
    TokenType.SUB: (ops.sub, ErrorKind.SUB_ERROR),
    TokenType.MUL: (ops.mul, ErrorKind.MUL_ERROR),
    TokenType.DUP: (ops.dup, ErrorKind.DUP_ERROR),
    TokenType.EQ: (ops.eq, ErrorKind.EQ_ERROR),
    TokenType.NEQ: (ops.neq, ErrorKind.NEQ_ERROR),
    TokenType.POP: (ops.pop, ErrorKind.POP_ERROR),
    TokenType.SWAP: (ops.swap, ErrorKind.SWAP_ERROR),
    TokenType.CONCAT: (ops.concat, ErrorKind.CONCAT_ERROR),
    TokenType.INSERT: (ops.insert_vector, ErrorKind.INSERT_ERROR),
    TokenType.SIZE: (ops.size, ErrorKind.SIZE_ERROR),
}

# Instructions that consume one operand token: accepted types + error kind
OPERANDS: Dict[TokenType, Tuple[FrozenSet[TokenType], ErrorKind]] = {
    TokenType.PUSH: (LITERALS, ErrorKind.INVALID_PUSH),
    TokenType.PUSH_INT: (frozenset({TokenType.INT}), ErrorKind.INVALID_INTEGER),
    TokenType.PUSH_BOOL: (frozenset({TokenType.BOOL}), ErrorKind.INVALID_BOOL),
    TokenType.PUSH_STR: (frozenset({TokenType.STRING}), ErrorKind.INVALID_STRING),
    TokenType.INDEX: (frozenset({TokenType.INT}), ErrorKind.INVALID_INTEGER),
    TokenType.JUMP: (frozenset({TokenType.LABEL_NAME}), ErrorKind.INVALID_LABEL),
    TokenType.JUMPI: (frozenset({TokenType.LABEL_NAME}), ErrorKind.INVALID_LABEL),
}

LITERAL_VALUES = {
    TokenType.INT: Value.of_int,
    TokenType.BOOL: Value.of_bool,
    TokenType.STRING: Value.of_str,
}


def format_stack(stack: Stack) -> str:
    """Render a stack top-first, e.g. ``[11 : int, "a" : string]``."""
    return "[" + ", ".join(str(el) for el in stack) + "]"


# ──────────────────────────────────────────────
# State, options, result
# ──────────────────────────────────────────────

@dataclass
class RunOptions:
    strict_labels: bool = True                           # pending label at EOF is an error
    on_log: Optional[Callable[[Stack], None]] = None     # receives the stack on LOG


@dataclass
class EvaluationState:
    stack: Stack = ()
    prev_op: Optional[TokenType] = None                  # last instruction recognized
    resolver: JumpResolver = field(default_factory=JumpResolver)


@dataclass
class RunResult:
    stack: Stack
    pending_label: Optional[str] = None                  # set only with strict_labels off

    def values(self) -> list:
        """Top-first plain Python values."""
        return [el.value.to_python() for el in self.stack]


# ──────────────────────────────────────────────
# The Interpreter
# ──────────────────────────────────────────────

class Interpreter:
    """Single-pass LIFO Script interpreter.

    Usage:
        interp = Interpreter('PUSH_INT 6 PUSH_INT 5 ADD')
        result = interp.run()
        result.values()   # [11]
    """

    def __init__(self, source: str, options: Optional[RunOptions] = None):
        self.source = source
        self.options = options or RunOptions()
        self.state = EvaluationState()
        self.steps = 0
        self._tokens: Iterator[Token] = Lexer(source).tokens()
        self._last: Optional[Token] = None
        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> bool:
        """Execute one token. Returns False once the input is exhausted."""
        tok = self._next()
        if tok is None:
            return False
        handler = self._dispatch.get(tok.type, self._op_unexpected)
        if tok.type in INSTRUCTIONS:
            self.state.prev_op = tok.type
        handler(tok)
        self.steps += 1
        if log.isEnabledFor(logging.DEBUG):
            log.debug("L%d:%d %-12s depth=%d%s", tok.line, tok.col, tok.text,
                      len(self.state.stack),
                      " (skipping)" if self.state.resolver.skipping else "")
        return True

    def run(self) -> RunResult:
        """Run to end of input and return the final stack."""
        while self.step():
            pass
        resolver = self.state.resolver
        try:
            resolver.finish()
        except LabelError as e:
            if self.options.strict_labels:
                line, col = self._end_position()
                raise ScriptError(ErrorKind.UNRESOLVED_LABEL, str(e), line, col) from e
            log.warning("%s; ending in skip mode", e)
        return RunResult(self.state.stack, resolver.pending)

    # ══════════════════════════════════════════════
    # Token access
    # ══════════════════════════════════════════════

    def _next(self) -> Optional[Token]:
        tok = next(self._tokens, None)
        if tok is not None:
            self._last = tok
        return tok

    def _end_position(self) -> Tuple[Optional[int], Optional[int]]:
        if self._last is None:
            return None, None
        return self._last.line, self._last.col

    def _operand(self, tok: Token) -> Token:
        """Fetch the operand of the instruction recognized last."""
        accepted, kind = OPERANDS[self.state.prev_op]
        operand = self._next()
        if operand is None:
            raise ScriptError(kind, tok.text, tok.line, tok.col)
        if operand.type not in accepted:
            raise ScriptError(kind, operand.text, operand.line, operand.col)
        return operand

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> Dict[TokenType, Callable[[Token], None]]:
        dispatch: Dict[TokenType, Callable[[Token], None]] = {
            op: self._op_stack for op in STACK_OPS
        }
        dispatch.update({
            TokenType.PUSH: self._op_push,
            TokenType.PUSH_INT: self._op_push,
            TokenType.PUSH_BOOL: self._op_push,
            TokenType.PUSH_STR: self._op_push,
            TokenType.EMPTY_VECTOR: self._op_empty_vector,
            TokenType.INDEX: self._op_index,
            TokenType.JUMP: self._op_jump,
            TokenType.JUMPI: self._op_jumpi,
            TokenType.LOG: self._op_log,
            TokenType.LABEL_DECL: self._op_label_decl,
            TokenType.INT: self._op_literal,
            TokenType.BOOL: self._op_literal,
            TokenType.STRING: self._op_literal,
        })
        return dispatch

    def _apply(self, tok: Token, kind: ErrorKind, fn: Callable[[Stack], Stack]):
        try:
            new_stack = fn(self.state.stack)
        except ops.StackError as e:
            raise ScriptError(kind, str(e), tok.line, tok.col) from e
        self.state.stack = new_stack

    def _op_stack(self, tok: Token):
        if self.state.resolver.skipping:
            return
        fn, kind = STACK_OPS[tok.type]
        self._apply(tok, kind, fn)

    def _op_push(self, tok: Token):
        literal = self._operand(tok)
        if self.state.resolver.skipping:
            return
        el = StackEl(tok.type, LITERAL_VALUES[literal.type](literal.value))
        self.state.stack = ops.push(self.state.stack, el)

    def _op_empty_vector(self, tok: Token):
        if not self.state.resolver.skipping:
            self.state.stack = ops.empty_vector(self.state.stack)

    def _op_index(self, tok: Token):
        position = self._operand(tok).value
        if self.state.resolver.skipping:
            return
        self._apply(tok, ErrorKind.INDEX_ERROR, lambda s: ops.index(s, position))

    def _op_jump(self, tok: Token):
        label = self._operand(tok).value
        self.state.resolver.jump(label)

    def _op_jumpi(self, tok: Token):
        resolver = self.state.resolver
        try:
            # The condition is checked before the label operand is read
            if not resolver.skipping:
                resolver.condition(self.state.stack)
            label = self._operand(tok).value
            self.state.stack = resolver.jumpi(self.state.stack, label)
        except JumpiError as e:
            raise ScriptError(ErrorKind.JUMPI_ERROR, str(e), tok.line, tok.col) from e

    def _op_label_decl(self, tok: Token):
        try:
            self.state.resolver.declare(tok.value)
        except LabelError as e:
            raise ScriptError(ErrorKind.UNSET_LABEL, tok.text, tok.line, tok.col) from e

    def _op_log(self, tok: Token):
        log.info("current stack: %s", format_stack(self.state.stack))
        if self.options.on_log is not None:
            self.options.on_log(self.state.stack)

    def _op_literal(self, tok: Token):
        """A literal outside an operand position is ignored."""

    def _op_unexpected(self, tok: Token):
        """Tokens that cannot start an instruction."""
        if tok.type is TokenType.INVALID:
            raise ScriptError(ErrorKind.INVALID_TOKEN, tok.text, tok.line, tok.col)
        # A label name outside an operand position
        raise ScriptError(ErrorKind.INVALID_OPCODE, tok.text, tok.line, tok.col)


def run_source(source: str, *, strict_labels: bool = True,
               on_log: Optional[Callable[[Stack], None]] = None) -> RunResult:
    """Run a whole script and return its final stack."""
    options = RunOptions(strict_labels=strict_labels, on_log=on_log)
    return Interpreter(source, options).run()


def tokenize(source: str) -> List[Token]:
    """Classify a script without executing it."""
    return Lexer(source).tokenize()
