"""
Error taxonomy for LIFO Script.

Every failure surfaced to a caller is a ``ScriptError`` tagged with one
``ErrorKind``. Errors are fatal: the run stops at the first one and no
partial stack is returned.
"""

from __future__ import annotations
import enum
from typing import Optional

__all__ = ['ErrorKind', 'ScriptError']


class ErrorKind(enum.Enum):
    # Recognizer
    INVALID_INTEGER = "InvalidInteger"
    INVALID_BOOL = "InvalidBool"
    INVALID_STRING = "InvalidString"
    INVALID_PUSH = "InvalidPush"
    INVALID_LABEL = "InvalidLabel"
    INVALID_OPCODE = "InvalidOpcode"
    INVALID_TOKEN = "InvalidToken"

    # Jump resolver
    UNSET_LABEL = "UnsetLabel"
    UNRESOLVED_LABEL = "UnresolvedLabel"
    JUMPI_ERROR = "JumpiError"

    # Stack engine, one per instruction
    ADD_ERROR = "AddError"
    SUB_ERROR = "SubError"
    MUL_ERROR = "MulError"
    DUP_ERROR = "DupError"
    EQ_ERROR = "EqError"
    NEQ_ERROR = "NeqError"
    POP_ERROR = "PopError"
    SWAP_ERROR = "SwapError"
    CONCAT_ERROR = "ConcatError"
    INSERT_ERROR = "InsertError"
    SIZE_ERROR = "SizeError"
    INDEX_ERROR = "IndexError"


class ScriptError(Exception):
    """A fatal error raised while scanning or executing a script."""
    def __init__(self, kind: ErrorKind, detail: str,
                 line: Optional[int] = None, col: Optional[int] = None):
        self.kind = kind
        self.detail = detail
        self.line = line
        self.col = col
        where = f" (line {line}, col {col})" if line is not None else ""
        super().__init__(f"{kind.value}: {detail}{where}")
