"""
LIFO Script
===========
A single-pass interpreter for a small stack-based instruction language.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────────┐
    │  Source  │───>│  Lexer   │───>│ Interpreter │───>│ Final stack  │
    │  (text)  │    │ (tokens) │    │  (dispatch) │    │ or one error │
    └──────────┘    └──────────┘    └──────┬──────┘    └──────────────┘
                                           │
                              ┌────────────┴────────────┐
                              │                         │
                        ┌─────┴──────┐          ┌───────┴───────┐
                        │ stack.py   │          │   jumps.py    │
                        │ (engine)   │          │ (skip mode)   │
                        └────────────┘          └───────────────┘

    - lexer.py:       Classifies lexemes lazily (keywords, literals, labels)
    - interpreter.py: Pulls tokens, executes each one as it arrives
    - stack.py:       Pure stack operations with precondition checks
    - jumps.py:       Forward-jump resolver (NORMAL / PENDING label)
    - values.py:      Tagged values and homogeneous vectors
    - errors.py:      ErrorKind taxonomy and ScriptError
"""

__version__ = "0.2.0"

from .errors import ErrorKind, ScriptError
from .lexer import Lexer, Token, TokenType
from .values import LifoVector, StackEl, TypeMismatch, Value, ValueType
from .interpreter import (
    EvaluationState,
    Interpreter,
    RunOptions,
    RunResult,
    format_stack,
    run_source,
    tokenize,
)
